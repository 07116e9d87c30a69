"""
Persistence Service
Storage for templates, organizations and issued certificates
"""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from databases import Database

from fomcert.schemas.certificate import CertificateStatus, IssuedCertificate
from fomcert.schemas.organization import Organization
from fomcert.schemas.template import CertificateTemplate



class Persistence(ABC):
    """Storage operations the certificate manager depends on"""

    @abstractmethod
    async def get_template(self, template_id: str) -> Optional[CertificateTemplate]:
        ...

    @abstractmethod
    async def save_template(self, template: CertificateTemplate) -> None:
        ...

    @abstractmethod
    async def list_templates(self, organization_id: Optional[str] = None) -> List[CertificateTemplate]:
        ...

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        ...

    @abstractmethod
    async def save_organization(self, organization: Organization) -> None:
        ...

    @abstractmethod
    async def save_issued_certificate(self, certificate: IssuedCertificate) -> None:
        ...

    @abstractmethod
    async def get_issued_certificate(self, certificate_id: str) -> Optional[IssuedCertificate]:
        ...

    @abstractmethod
    async def update_status(
        self,
        certificate_id: str,
        status: CertificateStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[IssuedCertificate]:
        """Set the status and merge fields into custom_fields"""

    @abstractmethod
    async def next_sequence(self, organization_id: str, template_id: str) -> int:
        """Atomically increment and return the counter, starting at 1"""

    @abstractmethod
    async def list_issued_certificates(self, organization_id: Optional[str] = None) -> List[IssuedCertificate]:
        ...

    @abstractmethod
    async def latest_chain_hash(self, organization_id: str) -> Optional[str]:
        ...


def _with_status(
    certificate: IssuedCertificate,
    status: CertificateStatus,
    fields: Optional[Dict[str, Any]],
) -> IssuedCertificate:
    custom_fields = dict(certificate.custom_fields)
    custom_fields.update(fields or {})
    return certificate.model_copy(update={
        "status": status,
        "custom_fields": custom_fields,
        "last_modified": datetime.now(timezone.utc),
    })


class InMemoryPersistence(Persistence):
    """Process-local store, used for tests and single-process development"""

    def __init__(self):
        self._templates: Dict[str, CertificateTemplate] = {}
        self._organizations: Dict[str, Organization] = {}
        self._certificates: Dict[str, IssuedCertificate] = {}
        self._sequences: Dict[Tuple[str, str], int] = defaultdict(int)
        self._chain_heads: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_template(self, template_id: str) -> Optional[CertificateTemplate]:
        return self._templates.get(template_id)

    async def save_template(self, template: CertificateTemplate) -> None:
        self._templates[template.id] = template

    async def list_templates(self, organization_id: Optional[str] = None) -> List[CertificateTemplate]:
        return [
            t for t in self._templates.values()
            if organization_id is None or t.organization_id in (None, organization_id)
        ]

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        return self._organizations.get(organization_id)

    async def save_organization(self, organization: Organization) -> None:
        self._organizations[organization.id] = organization

    async def save_issued_certificate(self, certificate: IssuedCertificate) -> None:
        async with self._lock:
            self._certificates[certificate.id] = certificate
            if certificate.security_data.blockchain_hash:
                self._chain_heads[certificate.organization_id] = certificate.security_data.blockchain_hash

    async def get_issued_certificate(self, certificate_id: str) -> Optional[IssuedCertificate]:
        return self._certificates.get(certificate_id)

    async def update_status(
        self,
        certificate_id: str,
        status: CertificateStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[IssuedCertificate]:
        async with self._lock:
            certificate = self._certificates.get(certificate_id)
            if not certificate:
                return None
            updated = _with_status(certificate, status, fields)
            self._certificates[certificate_id] = updated
            return updated

    async def next_sequence(self, organization_id: str, template_id: str) -> int:
        async with self._lock:
            key = (organization_id, template_id)
            self._sequences[key] += 1
            return self._sequences[key]

    async def list_issued_certificates(self, organization_id: Optional[str] = None) -> List[IssuedCertificate]:
        return [
            c for c in self._certificates.values()
            if organization_id is None or c.organization_id == organization_id
        ]

    async def latest_chain_hash(self, organization_id: str) -> Optional[str]:
        return self._chain_heads.get(organization_id)


class DatabasePersistence(Persistence):
    """
    SQL store over the `databases` connection

    Records are kept as JSON payloads with the columns needed for lookups
    and counting alongside.
    """

    def __init__(self, database: Database):
        self.database = database

    async def get_template(self, template_id: str) -> Optional[CertificateTemplate]:
        row = await self.database.fetch_one(
            "SELECT payload FROM certificate_templates WHERE id = :id",
            {"id": template_id}
        )
        if not row:
            return None
        return CertificateTemplate.model_validate_json(row["payload"])

    async def save_template(self, template: CertificateTemplate) -> None:
        await self.database.execute(
            """
            INSERT INTO certificate_templates (id, organization_id, name, category, payload)
            VALUES (:id, :organization_id, :name, :category, :payload)
            ON CONFLICT (id) DO UPDATE SET
                organization_id = excluded.organization_id,
                name = excluded.name,
                category = excluded.category,
                payload = excluded.payload,
                updated_at = CURRENT_TIMESTAMP
            """,
            {
                "id": template.id,
                "organization_id": template.organization_id,
                "name": template.name,
                "category": template.category,
                "payload": template.model_dump_json(by_alias=True),
            }
        )

    async def list_templates(self, organization_id: Optional[str] = None) -> List[CertificateTemplate]:
        params = {}
        org_filter = ""
        if organization_id:
            org_filter = "WHERE organization_id IS NULL OR organization_id = :organization_id"
            params["organization_id"] = organization_id

        rows = await self.database.fetch_all(
            f"SELECT payload FROM certificate_templates {org_filter} ORDER BY name",
            params
        )
        return [CertificateTemplate.model_validate_json(row["payload"]) for row in rows]

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        row = await self.database.fetch_one(
            "SELECT payload FROM organizations WHERE id = :id",
            {"id": organization_id}
        )
        if not row:
            return None
        return Organization.model_validate_json(row["payload"])

    async def save_organization(self, organization: Organization) -> None:
        await self.database.execute(
            """
            INSERT INTO organizations (id, name, prefix, payload)
            VALUES (:id, :name, :prefix, :payload)
            ON CONFLICT (id) DO UPDATE SET
                name = excluded.name,
                prefix = excluded.prefix,
                payload = excluded.payload
            """,
            {
                "id": organization.id,
                "name": organization.name,
                "prefix": organization.prefix,
                "payload": organization.model_dump_json(),
            }
        )

    async def save_issued_certificate(self, certificate: IssuedCertificate) -> None:
        async with self.database.transaction():
            await self.database.execute(
                """
                INSERT INTO issued_certificates
                (id, template_id, template_name, organization_id, recipient_name, status, security_level, payload)
                VALUES (:id, :template_id, :template_name, :organization_id, :recipient_name, :status, :security_level, :payload)
                """,
                {
                    "id": certificate.id,
                    "template_id": certificate.template_id,
                    "template_name": certificate.template_name,
                    "organization_id": certificate.organization_id,
                    "recipient_name": certificate.recipient_name,
                    "status": certificate.status.value,
                    "security_level": certificate.security_data.level.value,
                    "payload": certificate.model_dump_json(),
                }
            )
            if certificate.security_data.blockchain_hash:
                await self.database.execute(
                    """
                    INSERT INTO hash_chain_heads (organization_id, last_hash, certificate_id)
                    VALUES (:organization_id, :last_hash, :certificate_id)
                    ON CONFLICT (organization_id) DO UPDATE SET
                        last_hash = excluded.last_hash,
                        certificate_id = excluded.certificate_id,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    {
                        "organization_id": certificate.organization_id,
                        "last_hash": certificate.security_data.blockchain_hash,
                        "certificate_id": certificate.id,
                    }
                )

    async def get_issued_certificate(self, certificate_id: str) -> Optional[IssuedCertificate]:
        row = await self.database.fetch_one(
            "SELECT payload FROM issued_certificates WHERE id = :id",
            {"id": certificate_id}
        )
        if not row:
            return None
        return IssuedCertificate.model_validate_json(row["payload"])

    async def update_status(
        self,
        certificate_id: str,
        status: CertificateStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[IssuedCertificate]:
        async with self.database.transaction():
            certificate = await self.get_issued_certificate(certificate_id)
            if not certificate:
                return None
            updated = _with_status(certificate, status, fields)
            await self.database.execute(
                """
                UPDATE issued_certificates
                SET status = :status, payload = :payload, updated_at = CURRENT_TIMESTAMP
                WHERE id = :id
                """,
                {"id": certificate_id, "status": status.value, "payload": updated.model_dump_json()}
            )
        return updated

    async def next_sequence(self, organization_id: str, template_id: str) -> int:
        value = await self.database.fetch_val(
            """
            INSERT INTO sequence_counters (organization_id, template_id, value)
            VALUES (:organization_id, :template_id, 1)
            ON CONFLICT (organization_id, template_id)
            DO UPDATE SET value = sequence_counters.value + 1
            RETURNING value
            """,
            {"organization_id": organization_id, "template_id": template_id}
        )
        return int(value)

    async def list_issued_certificates(self, organization_id: Optional[str] = None) -> List[IssuedCertificate]:
        params = {}
        org_filter = ""
        if organization_id:
            org_filter = "WHERE organization_id = :organization_id"
            params["organization_id"] = organization_id

        rows = await self.database.fetch_all(
            f"SELECT payload FROM issued_certificates {org_filter}",
            params
        )
        return [IssuedCertificate.model_validate_json(row["payload"]) for row in rows]

    async def latest_chain_hash(self, organization_id: str) -> Optional[str]:
        return await self.database.fetch_val(
            "SELECT last_hash FROM hash_chain_heads WHERE organization_id = :organization_id",
            {"organization_id": organization_id}
        )
