"""
Verify that the database and the file store agree.

This script:
1. Counts rows in every table
2. Lists reports whose backing file is missing from the file store
3. Lists share grants whose recipient account was removed (email-only)

Usage:
    python scripts/verify_storage.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import get_settings
from src.core.database import get_db_context
from src.models import Report, ShareGrant, User, Vital
from src.services.storage_service import create_file_store


async def find_missing_files(reports, file_store):
    missing = []
    for report in reports:
        if not await file_store.exists(report.file_path):
            missing.append(report)
    return missing


def main():
    settings = get_settings()
    file_store = create_file_store(settings)

    with get_db_context() as db:
        counts = {
            "users": db.query(User).count(),
            "reports": db.query(Report).count(),
            "vitals": db.query(Vital).count(),
            "shares": db.query(ShareGrant).count(),
        }

        print("\n" + "=" * 60)
        print("📊 STORAGE CONSISTENCY CHECK")
        print("=" * 60)
        print(f"\n🗄️  Backend: {settings.storage_backend}")
        print(f"\n📁 Record Counts:")
        for table, count in counts.items():
            print(f"  {table}: {count}")

        reports = db.query(Report).order_by(Report.upload_date.desc()).all()
        missing = asyncio.run(find_missing_files(reports, file_store))

        print(f"\n📄 Reports without a backing file: {len(missing)}")
        for report in missing:
            print(f"    - {report.id} '{report.title}' -> {report.file_path}")

        email_only = (
            db.query(ShareGrant)
            .filter(ShareGrant.shared_with_user_id.is_(None))
            .count()
        )
        print(f"\n🔗 Email-only share grants: {email_only}")

        print(f"\n{'='*60}\n")
        if missing:
            print("⚠️  Database references files that no longer exist")
            return 1
        print("✅ Database and file store are consistent")
        return 0


if __name__ == "__main__":
    sys.exit(main())
