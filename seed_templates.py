"""Seed script: inserts the four starter document templates.

Run after applying the Alembic migration:

    python seed_templates.py

Templates seeded (skipped when a template with the same name exists):
    Service Contract           — business
    Employment Contract        — employment
    Property Sale Agreement    — property
    Last Will and Testament    — family

Each ``template`` value is the form-field schema the document wizard renders.
"""
import asyncio
import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal, health_check
from app.services.storage import DatabaseStorage

logger = logging.getLogger(__name__)


def _field(name: str, label: str, type_: str = "text", required: bool = True) -> Dict[str, Any]:
    return {"name": name, "label": label, "type": type_, "required": required}


TEMPLATES_SEED: List[Dict[str, Any]] = [
    {
        "name": "Service Contract",
        "description": "Standard service agreement template",
        "category": "business",
        "template": {
            "fields": [
                _field("provider_name", "Service provider"),
                _field("client_name", "Client"),
                _field("services", "Description of services", "textarea"),
                _field("fee", "Fee (KES)", "number"),
                _field("start_date", "Start date", "date"),
                _field("end_date", "End date", "date", required=False),
            ]
        },
    },
    {
        "name": "Employment Contract",
        "description": "Employment agreement template",
        "category": "employment",
        "template": {
            "fields": [
                _field("employer_name", "Employer"),
                _field("employee_name", "Employee"),
                _field("job_title", "Job title"),
                _field("salary", "Monthly salary (KES)", "number"),
                _field("start_date", "Start date", "date"),
                _field("probation_months", "Probation period (months)", "number", required=False),
            ]
        },
    },
    {
        "name": "Property Sale Agreement",
        "description": "Property transfer agreement",
        "category": "property",
        "template": {
            "fields": [
                _field("vendor_name", "Vendor"),
                _field("purchaser_name", "Purchaser"),
                _field("title_number", "Land title number"),
                _field("location", "Property location"),
                _field("purchase_price", "Purchase price (KES)", "number"),
                _field("completion_date", "Completion date", "date"),
            ]
        },
    },
    {
        "name": "Last Will and Testament",
        "description": "Will and testament document",
        "category": "family",
        "template": {
            "fields": [
                _field("testator_name", "Testator"),
                _field("executor_name", "Executor"),
                _field("beneficiaries", "Beneficiaries and bequests", "textarea"),
                _field("guardian_name", "Guardian of minor children", required=False),
                _field("witnesses", "Witnesses", "textarea"),
            ]
        },
    },
]


async def seed_templates(session: AsyncSession) -> int:
    """Insert missing starter templates. Returns how many were added."""
    storage = DatabaseStorage(session)
    existing = {t.name for t in await storage.list_document_templates()}

    added = 0
    for data in TEMPLATES_SEED:
        if data["name"] in existing:
            logger.info("Template %r already present, skipping", data["name"])
            continue
        await storage.create_document_template(data)
        added += 1
    return added


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    async def main() -> None:
        if not await health_check():
            logger.error("Database unreachable. Check DATABASE_URL in your .env file.")
            raise SystemExit(1)

        async with AsyncSessionLocal() as session:
            added = await seed_templates(session)
            await session.commit()
        print(f"\n✓ {added} template(s) added, {len(TEMPLATES_SEED) - added} already present.")

    asyncio.run(main())
