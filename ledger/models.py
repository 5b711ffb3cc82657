from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator


class Account(BaseModel):
    id: str
    email: str
    wallet_address: str
    referral_code: str
    referred_by: str
    balance: int = Field(default=0, ge=0)
    referrals: list[str] = Field(default_factory=list)
    last_withdrawal_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RewardCredit(BaseModel):
    """A pending +amount / referrals-append pair for one account."""
    account_id: str
    amount: int
    rewarded_account_id: str
    level: Optional[int] = None


class PaymentTransaction(BaseModel):
    id: str
    sender: str
    recipient: Optional[str] = None
    amount: Optional[int] = None


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    wallet_address: str = Field(..., min_length=1, alias="walletAddress")
    referral_code: Optional[str] = Field(default=None, alias="referralCode")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "email": "new.member@example.com",
            "password": "s3cret-pass",
            "walletAddress": "SJDMEUSIKIU4LIJIMH4F7ZVMJOGF6PO4RNTPLISOVBLG6LOPG4HMWGVIKU",
            "referralCode": "Xk2p9VqWmdTnYc8s1LrA",
        }
    })


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    wallet_address: Optional[str] = Field(default=None, alias="walletAddress")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_credentials(self) -> "LoginRequest":
        if not (self.email and self.password) and not self.wallet_address:
            raise ValueError("Either email/password or wallet address is required")
        return self

    @property
    def uses_password(self) -> bool:
        return bool(self.email and self.password)


class VerifyPaymentRequest(BaseModel):
    wallet_address: str = Field(..., min_length=1, alias="walletAddress")
    tx_id: str = Field(..., min_length=1, alias="txId")

    model_config = ConfigDict(populate_by_name=True)


class AccountResponse(BaseModel):
    message: str
    user_id: str = Field(..., serialization_alias="userId")
    referral_code: str = Field(..., serialization_alias="referralCode")
    balance: int = Field(..., serialization_alias="aaaBalance")
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    token: Optional[str] = None


class SignupResponse(AccountResponse):
    message: str = "Signup successful"
    token: str

    @classmethod
    def from_account(cls, account: Account, token: str) -> "SignupResponse":
        return cls(
            user_id=account.id,
            referral_code=account.referral_code,
            balance=account.balance,
            wallet_address=account.wallet_address,
            token=token,
        )


class LoginResponse(AccountResponse):
    message: str = "Login successful"
    referrals: list[str] = Field(default_factory=list)

    @classmethod
    def from_account(cls, account: Account, token: Optional[str] = None,
                     message: str = "Login successful") -> "LoginResponse":
        return cls(
            message=message,
            user_id=account.id,
            referral_code=account.referral_code,
            balance=account.balance,
            wallet_address=account.wallet_address,
            referrals=list(account.referrals),
            token=token,
        )


class VerifyPaymentResponse(BaseModel):
    verified: bool


class TotalMembersResponse(BaseModel):
    total_members: int = Field(..., serialization_alias="totalMembers")
