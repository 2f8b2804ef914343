import logging
import secrets
import string

from fastapi import status
from psycopg.errors import UniqueViolation

from oneuptime.core.database import get_connection
from oneuptime.core.errors import AppError, bad_data
from oneuptime.models.entities import DomainEntity
from oneuptime.models.schemas.domain import DomainCreateRequest, DomainRead
from oneuptime.repositories.domain_repository import DomainRepository
from oneuptime.services.dns_verifier import TxtRecordVerifier

logger = logging.getLogger(__name__)

VERIFICATION_PREFIX = "oneuptime-verification-"
VERIFICATION_RANDOM_LENGTH = 20
_VERIFICATION_ALPHABET = string.ascii_lowercase + string.digits


def generate_verification_text() -> str:
    suffix = "".join(
        secrets.choice(_VERIFICATION_ALPHABET) for _ in range(VERIFICATION_RANDOM_LENGTH)
    )
    return VERIFICATION_PREFIX + suffix


def _to_domain_read(domain: DomainEntity) -> DomainRead:
    return DomainRead(
        id=domain.id,
        project_id=domain.project_id,
        domain=domain.domain,
        domain_verification_text=domain.domain_verification_text,
        is_verified=domain.is_verified,
        created_at=domain.created_at,
        updated_at=domain.updated_at,
    )


class DomainService:
    def __init__(
        self,
        domain_repository: DomainRepository,
        txt_verifier: TxtRecordVerifier,
        database_url: str | None = None,
    ) -> None:
        self.domain_repository = domain_repository
        self.txt_verifier = txt_verifier
        self.database_url = database_url

    def list_domains(self, project_id: int) -> list[DomainRead]:
        return [
            _to_domain_read(domain)
            for domain in self.domain_repository.list_by_project(project_id)
        ]

    def get_domain(self, project_id: int, domain_id: int) -> DomainRead:
        domain = self.domain_repository.get_by_id(domain_id, project_id=project_id)
        if domain is None:
            raise self._domain_not_found(domain_id)
        return _to_domain_read(domain)

    def create_domain(self, project_id: int, payload: DomainCreateRequest) -> DomainRead:
        name = self._normalize_domain(payload.domain)
        try:
            domain = self.domain_repository.create(
                project_id=project_id,
                domain=name,
                domain_verification_text=generate_verification_text(),
            )
        except UniqueViolation as exc:
            raise AppError(
                status_code=status.HTTP_409_CONFLICT,
                code="DOMAIN_CONFLICT",
                message="Domain already exists in this project.",
                details={"domain": name},
            ) from exc
        return _to_domain_read(domain)

    def update_domain(
        self,
        project_id: int,
        domain_id: int,
        *,
        is_verified: bool,
        is_root: bool = False,
    ) -> DomainRead:
        with get_connection(self.database_url) as connection:
            domain = self.domain_repository.get_by_id(
                domain_id,
                project_id=project_id,
                connection=connection,
            )
            if domain is None or not domain.domain:
                raise self._domain_not_found(domain_id)

            if is_verified and not is_root:
                self._check_txt_record(domain)

            updated = self.domain_repository.set_verified(
                domain_id=domain_id,
                is_verified=is_verified,
                connection=connection,
            )
        if updated is None:
            raise self._domain_not_found(domain_id)

        logger.info("Domain %s in project %s verified=%s", updated.domain, project_id, is_verified)
        return _to_domain_read(updated)

    def delete_domain(self, project_id: int, domain_id: int) -> None:
        deleted = self.domain_repository.delete(domain_id, project_id=project_id)
        if not deleted:
            raise self._domain_not_found(domain_id)

    def _check_txt_record(self, domain: DomainEntity) -> None:
        verification_text = domain.domain_verification_text
        if not verification_text:
            raise bad_data(
                f"Domain verification text with id {domain.id} not found.",
                details={"domain_id": domain.id},
            )

        if not self.txt_verifier.verify_txt_record(domain.domain, verification_text):
            raise bad_data(
                f"Verification TXT record {verification_text} not found in domain "
                f"{domain.domain}. Please add a TXT record to verify the domain. "
                "If you have already added the TXT record, please wait for few hours "
                "to let DNS to propagate.",
                details={"domain_id": domain.id, "domain": domain.domain},
            )

    def _normalize_domain(self, domain: str) -> str:
        normalized = domain.strip().lower().rstrip(".")
        if not normalized:
            raise AppError(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                code="VALIDATION_ERROR",
                message="Domain cannot be empty.",
                details={"field": "domain"},
            )
        return normalized

    def _domain_not_found(self, domain_id: int) -> AppError:
        return bad_data(
            f"Domain with id {domain_id} not found.",
            details={"domain_id": domain_id},
        )
