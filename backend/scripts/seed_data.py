"""
Seed script to generate synthetic purchase orders, delivery notes and users for demo purposes
"""
import sys
import os
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from sqlalchemy.orm import Session
from suratjalan.database import SessionLocal, engine, Base
from suratjalan.models.delivery_note import DeliveryNote
from suratjalan.models.purchase_order import PurchaseOrder
from suratjalan.models.user import User
from suratjalan.services.purchase_order_service import compute_total_value
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.services.store_gateway import StoreGateway
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

fake = Faker("id_ID")

PRODUCT_TYPES = ("CPO", "UCO", "Minyak Ikan")
COMPANIES = ("sbs", "mbs", "perorangan")

DEFAULT_USERS = [
    ("admin", "Administrator", "administrator", []),
    ("supervisor", "Supervisor Operasional", "supervisor", []),
    ("operator", "Operator Pengiriman", "operator", ["dashboard", "pengiriman", "surat-jalan"]),
    ("driver", "Driver", "driver", []),
]


def create_users(db: Session) -> list[User]:
    """Create the four default users, one per role"""
    users = []
    for username, name, role, menus in DEFAULT_USERS:
        user = User(
            username=username,
            name=name,
            role=role,
            email=f"{username}@ptsamuderaberkahsentosa.com",
            custom_menu_access=menus,
        )
        db.add(user)
        users.append(user)
    db.commit()
    return users


def create_purchase_orders(db: Session, count: int = 8) -> list[PurchaseOrder]:
    """Create synthetic purchase orders with no shipments yet"""
    pos = []
    for i in range(count):
        tonnage = float(fake.random_int(min=20, max=200))
        price = Decimal(str(fake.random_int(min=8_000_000, max=15_000_000)))
        po_date = date.today() - timedelta(days=fake.random_int(min=5, max=90))
        po = PurchaseOrder(
            po_number=f"PO-{po_date.year}-{str(i + 1).zfill(4)}",
            po_date=po_date,
            buyer_name=fake.company(),
            buyer_address=fake.address().replace("\n", ", "),
            buyer_phone=fake.phone_number(),
            buyer_email=fake.company_email(),
            product_type=fake.random_element(elements=PRODUCT_TYPES),
            total_tonnage=tonnage,
            price_per_ton=price,
            total_value=compute_total_value(tonnage, price),
            shipped_tonnage=0,
            remaining_tonnage=tonnage,
            status="Active",
            delivery_deadline=po_date + timedelta(days=fake.random_int(min=30, max=120)),
            payment_terms=fake.random_element(elements=("COD", "NET 14", "NET 30")),
            ppn_enabled=fake.boolean(),
            ppn_rate=0.11,
        )
        db.add(po)
        pos.append(po)
    db.commit()
    return pos


def create_delivery_notes(db: Session, pos: list[PurchaseOrder], count: int = 30) -> list[DeliveryNote]:
    """Create delivery notes; roughly one in five has no PO"""
    notes = []
    for i in range(count):
        status = fake.random_element(elements=("awaiting", "in-transit", "completed", "completed"))
        po = None if fake.random_int(min=1, max=5) == 1 else fake.random_element(elements=pos)
        has_seal = fake.boolean(chance_of_getting_true=60)
        note = DeliveryNote(
            date=date.today() - timedelta(days=fake.random_int(min=0, max=60)),
            vehicle_plate=fake.license_plate(),
            driver_name=fake.name(),
            delivery_note_number=f"SJ-{str(i + 1).zfill(5)}",
            destination=fake.city(),
            po_number=po.po_number if po else None,
            net_weight=float(fake.random_int(min=5, max=30)) if status == "completed" else None,
            status=status,
            has_seal=has_seal,
            seal_numbers=[str(fake.random_int(min=100000, max=999999)) for _ in range(fake.random_int(min=1, max=4))] if has_seal else [],
            company=fake.random_element(elements=COMPANIES),
        )
        db.add(note)
        notes.append(note)
    db.commit()
    return notes


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(PurchaseOrder).count():
            logger.info("Database already seeded, skipping.")
            return

        users = create_users(db)
        pos = create_purchase_orders(db)
        notes = create_delivery_notes(db, pos)
        logger.info(f"Created {len(users)} users, {len(pos)} purchase orders, {len(notes)} delivery notes")
    finally:
        db.close()

    reconciliation = ReconciliationService(StoreGateway(SessionLocal))
    for po in pos:
        reconciliation.recompute_po_balance(po.po_number)
    logger.info("PO balances reconciled.")


if __name__ == "__main__":
    main()
