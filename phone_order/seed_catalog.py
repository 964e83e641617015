from phone_order.db import SessionLocal, init_db
from phone_order.models import Product


def seed_catalog():
    # Note: Tables should be created via Alembic migrations in production.
    init_db()

    db = SessionLocal()
    try:
        existing = db.query(Product).count()
        if existing > 0:
            print(f"Catalog already has {existing} products. Not seeding again.")
            return

        products = [
            Product(name="Espresso Machine", price=249.00, stock_quantity=12),
            Product(name="Burr Grinder", price=89.50, stock_quantity=30),
            Product(name="Milk Frother", price=39.99, stock_quantity=0, stock_status="outofstock"),
            # Stock not tracked
            Product(name="House Blend Beans 1kg", price=24.00, stock_quantity=None),
            Product(name="Gift Card", price=50.00, stock_quantity=None, is_purchasable=False),
        ]

        db.add_all(products)
        db.commit()
        print(f"Seeded {len(products)} products.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
