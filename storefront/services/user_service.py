from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import AuthenticationError, ConflictError, StorageFailure
from storefront.domain.schemas import LoginIn, RegisterIn, UserSessionOut
from storefront.repos.user_repo import UserRepo
from storefront.services.experiment_service import ExperimentService, get_ui_config
from storefront.utils.logging import get_logger
from storefront.utils.settings import DEFAULT_COUNTRY

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session, experiments: ExperimentService):
        self.repo = UserRepo(db)
        self.experiments = experiments

    def register(self, payload: RegisterIn) -> UserSessionOut:
        try:
            if self.repo.get_user(payload.email):
                raise ConflictError("Użytkownik z tym emailem już istnieje")

            user = UserModel(
                email=payload.email,
                name=payload.name,
                password=payload.password,
                country=payload.country,
            )
            created = self.repo.create_user(user)
        except IntegrityError:
            #rownolegla rejestracja tego samego emaila
            self.repo.rollback()
            raise ConflictError("Użytkownik z tym emailem już istnieje")
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Rejestracja {payload.email} nieudana")
            raise StorageFailure("Nie udało się zarejestrować użytkownika")

        logger.info(f"Zarejestrowano uzytkownika {created.email} ({created.country})")
        return self._session(created)

    def login(self, payload: LoginIn) -> UserSessionOut:
        try:
            user = self.repo.get_user_by_credentials(payload.email, payload.password)
        except SQLAlchemyError:
            logger.exception(f"Logowanie {payload.email} nieudane")
            raise StorageFailure("Nie udało się zalogować")

        if not user:
            raise AuthenticationError("Niepoprawny email lub hasło")
        return self._session(user)

    def _session(self, user: UserModel) -> UserSessionOut:
        #decyzja wariantu na starcie sesji
        country = user.country or DEFAULT_COUNTRY
        decision = self.experiments.decide(user.email, country)
        return UserSessionOut(
            email=user.email,
            name=user.name,
            country=country,
            variant=decision.variant,
            uiConfig=get_ui_config(decision.variant),
        )
