class LedgerServiceError(Exception):
    pass


class DuplicateWalletError(LedgerServiceError):
    pass


class DuplicateEmailError(LedgerServiceError):
    pass


class InvalidReferralCodeError(LedgerServiceError):
    pass


class AccountNotFoundError(LedgerServiceError):
    pass


class InvalidCredentialsError(LedgerServiceError):
    pass


class OracleUnavailableError(LedgerServiceError):
    """The ledger oracle could not answer; verification degrades to False."""
