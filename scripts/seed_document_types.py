import os
import sys

from dotenv import load_dotenv

sys.path.append(os.getcwd())
load_dotenv()

from app.core.database import SessionLocal  # noqa: E402
from app.models.document_type import DocumentType  # noqa: E402

DOCUMENT_TYPES = [
    {"id": "balance-sheet", "name": "Balance Sheet", "base_price": 1000, "udin_required": True},
    {"id": "net-worth-certificate", "name": "Net Worth Certificate", "base_price": 1500, "udin_required": True},
    {"id": "turnover-certificate", "name": "Turnover Certificate", "base_price": 1200, "udin_required": True},
    {"id": "income-certificate", "name": "Income Certificate", "base_price": 800, "udin_required": True},
    {"id": "gst-audit-report", "name": "GST Audit Report", "base_price": 2500, "udin_required": True},
    {"id": "general-attestation", "name": "General Attestation", "base_price": 500, "udin_required": False},
]


def seed_document_types():
    db = SessionLocal()
    try:
        for data in DOCUMENT_TYPES:
            existing = db.query(DocumentType).filter(DocumentType.id == data["id"]).first()
            if existing:
                existing.name = data["name"]
                existing.base_price = data["base_price"]
                existing.udin_required = data["udin_required"]
                print(f"✓ Updated {data['id']}")
            else:
                db.add(DocumentType(**data))
                print(f"✓ Created {data['id']}")
        db.commit()
        print("\n✅ Document types seeded")
    except Exception as e:
        db.rollback()
        print(f"❌ Error: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_document_types()
