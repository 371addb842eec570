"""
Shared fixtures: a throwaway SQLite database per test, seeded with a small
fixed set of sales, and a TestClient wired to it through get_db.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import get_db, init_db
from app.main import app
from app.models.sale import Sale


def _sale(transaction_id, date, name, phone, gender, age, region, category, tags,
          quantity, total_amount, final_amount, payment_method):
    return {
        "transaction_id": transaction_id,
        "date": date,
        "customer_id": f"CUST-{transaction_id:03d}",
        "customer_name": name,
        "phone_number": phone,
        "gender": gender,
        "age": age,
        "customer_region": region,
        "customer_type": "Regular",
        "product_id": f"PROD-{transaction_id:03d}",
        "product_name": f"{category} item",
        "brand": "Acme",
        "product_category": category,
        "tags": tags,
        "quantity": quantity,
        "price_per_unit": total_amount / quantity,
        "discount_percentage": round((1 - final_amount / total_amount) * 100, 2),
        "total_amount": total_amount,
        "final_amount": final_amount,
        "payment_method": payment_method,
        "order_status": "Completed",
        "delivery_type": "Standard",
        "store_id": "ST-001",
        "store_location": "Mumbai",
        "salesperson_id": "EMP-01",
        "employee_name": "Harsh Agrawal",
    }


SAMPLE_SALES = [
    _sale(1, "2023-01-05", "Alice Johnson", "9876543210", "Female", 25, "North", "Electronics",
          "wireless,gadgets", 2, 200.0, 180.0, "Cash"),
    _sale(2, "2023-02-10", "Bob Smith", "9123456780", "Male", 40, "South", "Clothing",
          "fashion,casual", 1, 100.0, 100.0, "Credit Card"),
    _sale(3, "2023-03-15", "Carol White", "9000011111", "Female", 55, "East", "Beauty",
          "organic,skincare", 5, 500.0, 450.0, "UPI"),
    _sale(4, "2023-04-20", "David Brown", "9555512345", "Male", 33, "West", "Electronics",
          "gadgets,smart home", 3, 300.0, 270.0, "Debit Card"),
    _sale(5, "2023-05-25", "Eve Davis", "9444400000", "Female", 18, "North", "Clothing",
          "casual", 4, 160.0, 160.0, "Cash"),
    _sale(6, "2023-06-30", "Frank Miller", "9333300000", "Male", None, "Central", "Beauty",
          "", 1, 50.0, 45.0, "UPI"),
    _sale(7, "2023-07-04", "alice cooper", "9222200000", "Other", 62, "South", "Electronics",
          "wireless", 6, 600.0, 540.0, "Credit Card"),
    _sale(8, "2023-08-12", "Grace Lee", "9111100000", "Female", 29, "East", "Clothing",
          "fashion, formal", 2, 240.0, 216.0, "Debit Card"),
]


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'sales_test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(session_factory):
    with session_factory() as session:
        session.add_all([Sale(**row) for row in SAMPLE_SALES])
        session.commit()


def _client_for(factory):
    def override_get_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def client(session_factory, seeded):
    yield _client_for(session_factory)
    app.dependency_overrides.clear()


@pytest.fixture
def empty_client(session_factory):
    yield _client_for(session_factory)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(tmp_path):
    """Client whose database cannot be opened at all."""
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    yield _client_for(sessionmaker(bind=engine))
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def sample_sales():
    return SAMPLE_SALES
