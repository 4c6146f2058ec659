"""Seed the development database with demo cement trade data."""

from sqlalchemy import select

from app.backend.src.db import get_engine, session_scope
from app.backend.src.db.base import Base
from app.backend.src.models import CementType
from app.backend.src.services.seed import seed_demo_data


def main() -> None:
    """Create tables (if needed) and load demo data into an empty database."""

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    with session_scope() as session:
        if session.scalar(select(CementType.id).limit(1)) is not None:
            print("Database already contains data; skipping seed.")
            return

        result = seed_demo_data(session)

        print("✅ Development data ready!")
        print(f"Cement types: {result.cement_types}")
        print(f"Factories: {result.factories}")
        print(f"Customers: {result.customers}")
        print(f"Sales: {result.sales} / Purchases: {result.purchases}")
        print(f"Receivables: {result.receivables} / Payables: {result.payables}")


if __name__ == "__main__":
    main()
