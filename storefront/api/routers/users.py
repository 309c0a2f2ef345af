from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_experiments, require_tables, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import LoginIn, RegisterIn, UserSessionOut
from storefront.services.experiment_service import ExperimentService
from storefront.services.user_service import UserService

router = APIRouter(
    prefix="/api",
    tags=["users"],
    dependencies=[Depends(require_tables("users"))],
)


def get_service(
    db: Session = Depends(get_db),
    experiments: ExperimentService = Depends(get_experiments),
) -> UserService:
    return UserService(db, experiments)


@router.post("/register", response_model=UserSessionOut)
def register(payload: RegisterIn, svc: UserService = Depends(get_service)):
    try:
        return svc.register(payload)
    except StoreError as e:
        raise to_http(e)


@router.post("/login", response_model=UserSessionOut)
def login(payload: LoginIn, svc: UserService = Depends(get_service)):
    try:
        return svc.login(payload)
    except StoreError as e:
        raise to_http(e)
