from typing import Optional
from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .bootstrap import build_reward_ledger, build_transaction_verifier
from .logging_config import get_logger, setup_logging
from .models import (
    SignupRequest, LoginRequest, VerifyPaymentRequest,
    SignupResponse, LoginResponse, VerifyPaymentResponse, TotalMembersResponse,
)
from .service import (
    RewardLedger, LedgerServiceError, DuplicateWalletError, DuplicateEmailError,
    InvalidReferralCodeError, AccountNotFoundError, InvalidCredentialsError,
)
from .settings import settings
from .verifier import TransactionVerifier

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Referral Ledger API",
    description="Wallet-linked signups with multi-level referral rewards and fee verification",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

reward_ledger = build_reward_ledger(settings)
transaction_verifier = build_transaction_verifier(settings)


def get_reward_ledger() -> RewardLedger:
    return reward_ledger


def get_transaction_verifier() -> TransactionVerifier:
    return transaction_verifier


def require_allowed_origin(origin: Optional[str] = Header(default=None)) -> None:
    if origin not in settings.origins:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return token


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = [error.get("msg", "Invalid request") for error in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "; ".join(messages)},
    )


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": settings.app_name}


@app.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED,
          tags=["Accounts"], dependencies=[Depends(require_allowed_origin)])
def signup(request: SignupRequest, ledger: RewardLedger = Depends(get_reward_ledger)) -> SignupResponse:
    try:
        return ledger.create_account(request)
    except (DuplicateWalletError, DuplicateEmailError, InvalidReferralCodeError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LedgerServiceError:
        logger.exception("signup_failed", wallet_address=request.wallet_address)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@app.post("/login", response_model=LoginResponse, tags=["Accounts"],
          dependencies=[Depends(require_allowed_origin)])
def login(request: LoginRequest, ledger: RewardLedger = Depends(get_reward_ledger)) -> LoginResponse:
    try:
        return ledger.authenticate(request)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidCredentialsError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")


@app.get("/me", response_model=LoginResponse, tags=["Accounts"])
def me(token: str = Depends(get_bearer_token),
       ledger: RewardLedger = Depends(get_reward_ledger)) -> LoginResponse:
    try:
        claims = ledger.sessions.decode(token)
        account = ledger.get_account(claims["userId"])
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return LoginResponse.from_account(account, message="Account retrieved")


@app.post("/verify-payment", response_model=VerifyPaymentResponse, tags=["Payments"],
          dependencies=[Depends(require_allowed_origin)])
def verify_payment(request: VerifyPaymentRequest,
                   verifier: TransactionVerifier = Depends(get_transaction_verifier)) -> VerifyPaymentResponse:
    return VerifyPaymentResponse(verified=verifier.verify_payment(request.wallet_address, request.tx_id))


@app.post("/get-total-members", response_model=TotalMembersResponse, tags=["Accounts"],
          dependencies=[Depends(require_allowed_origin)])
def get_total_members(ledger: RewardLedger = Depends(get_reward_ledger)) -> TotalMembersResponse:
    try:
        return TotalMembersResponse(total_members=ledger.total_members())
    except LedgerServiceError:
        logger.exception("member_count_failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error.")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
