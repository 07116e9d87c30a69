"""
Seed the default organization and the stock template library
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fomcert.database import database, connect_db, disconnect_db
from fomcert.schemas.organization import FOM_ORGANIZATION
from fomcert.services.persistence import DatabasePersistence
from fomcert.services.template_library import default_template, get_template_library


async def seed_templates():
    await connect_db()

    try:
        persistence = DatabasePersistence(database)
        await persistence.save_organization(FOM_ORGANIZATION)

        templates = list(get_template_library().values()) + [default_template()]
        for template in templates:
            await persistence.save_template(template)
            print(f"[OK] Template {template.id}: {template.name}")

        print(f"[OK] Seeded {len(templates)} templates for {FOM_ORGANIZATION.name}")
    finally:
        await disconnect_db()


if __name__ == "__main__":
    asyncio.run(seed_templates())
