# migrations/add_cart_uniqueness_constraints.py
"""
CART UNIQUENESS MIGRATION
Merges duplicate carts / cart lines left by concurrent add-to-cart requests,
then adds the unique constraints the cart store relies on:

- carts(user_id)
- cart_items(cart_id, product_id, size)
"""

import psycopg2
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def merge_duplicate_carts(cur):
    """Move items of extra carts into the oldest cart of each user, then drop the extras"""
    cur.execute("""
        SELECT user_id, MIN(id) AS keep_id, ARRAY_AGG(id) AS cart_ids
        FROM carts
        GROUP BY user_id
        HAVING COUNT(*) > 1;
    """)
    duplicates = cur.fetchall()
    print(f"Users with more than one cart: {len(duplicates)}")

    for user_id, keep_id, cart_ids in duplicates:
        extra_ids = [cart_id for cart_id in cart_ids if cart_id != keep_id]
        cur.execute(
            "UPDATE cart_items SET cart_id = %s WHERE cart_id = ANY(%s);",
            (keep_id, extra_ids),
        )
        cur.execute("DELETE FROM carts WHERE id = ANY(%s);", (extra_ids,))
        print(f"   user {user_id}: merged carts {extra_ids} into {keep_id}")


def merge_duplicate_lines(cur):
    """Collapse repeated (cart, product, size) lines into one with the summed quantity"""
    cur.execute("""
        SELECT cart_id, product_id, size, MIN(id) AS keep_id, SUM(quantity) AS total
        FROM cart_items
        GROUP BY cart_id, product_id, size
        HAVING COUNT(*) > 1;
    """)
    duplicates = cur.fetchall()
    print(f"Duplicate cart lines: {len(duplicates)}")

    for cart_id, product_id, size, keep_id, total in duplicates:
        cur.execute("UPDATE cart_items SET quantity = %s WHERE id = %s;", (total, keep_id))
        cur.execute(
            """
            DELETE FROM cart_items
            WHERE cart_id = %s AND product_id = %s AND size = %s AND id <> %s;
            """,
            (cart_id, product_id, size, keep_id),
        )


def constraint_exists(cur, name):
    cur.execute("SELECT 1 FROM pg_constraint WHERE conname = %s;", (name,))
    return cur.fetchone() is not None


def run_migration():
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        print("❌ DATABASE_URL not found in .env file")
        return False

    print("🚀 CART UNIQUENESS MIGRATION")
    print("=" * 60)

    conn = None
    try:
        conn = psycopg2.connect(DATABASE_URL)
        cur = conn.cursor()
        print("✅ Database connection successful")

        merge_duplicate_carts(cur)
        merge_duplicate_lines(cur)

        cur.execute("UPDATE cart_items SET quantity = 1 WHERE quantity < 1;")
        if cur.rowcount:
            print(f"Fixed {cur.rowcount} cart lines with non-positive quantity")

        constraints = [
            ("uq_carts_user_id", "ALTER TABLE carts ADD CONSTRAINT uq_carts_user_id UNIQUE (user_id);"),
            (
                "uq_cart_items_cart_product_size",
                "ALTER TABLE cart_items ADD CONSTRAINT uq_cart_items_cart_product_size "
                "UNIQUE (cart_id, product_id, size);",
            ),
            (
                "ck_cart_items_quantity_positive",
                "ALTER TABLE cart_items ADD CONSTRAINT ck_cart_items_quantity_positive CHECK (quantity >= 1);",
            ),
        ]
        for name, statement in constraints:
            if constraint_exists(cur, name):
                print(f"✅ {name} already present")
                continue
            cur.execute(statement)
            print(f"✅ Added {name}")

        conn.commit()
        print("\n🎉 Migration completed")
        return True

    except psycopg2.Error as e:
        print(f"❌ Migration failed: {e}")
        if conn is not None:
            conn.rollback()
        return False
    finally:
        if conn is not None:
            conn.close()


if __name__ == "__main__":
    success = run_migration()
    exit(0 if success else 1)
