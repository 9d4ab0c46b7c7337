from smart_expense_manager.database import Category, Profile, SessionLocal, init_db
from smart_expense_manager.store import TransactionStore

DEFAULT_CATEGORIES = [
    ("Food", "🍕", "expense"),
    ("Transport", "🚗", "expense"),
    ("Shopping", "🛒", "expense"),
    ("Bills", "📄", "expense"),
    ("Entertainment", "🎬", "expense"),
    ("Health", "💊", "expense"),
    ("Education", "📚", "expense"),
    ("Other", "💰", "expense"),
    ("Salary", "💼", "income"),
    ("Freelance", "💻", "income"),
    ("Investments", "📈", "income"),
    ("Other Income", "🎁", "income"),
]


def seed_categories(db) -> int:
    if db.query(Category).first():
        return 0
    for name, icon, type_ in DEFAULT_CATEGORIES:
        db.add(Category(name=name, icon=icon, type=type_))
    db.commit()
    return len(DEFAULT_CATEGORIES)


def seed_demo_user(db, username: str = "demo", password: str = "demo123"):
    if db.query(Profile).filter(Profile.username == username).first():
        return None
    return TransactionStore(db).create_profile(username, password, full_name="Demo User", monthly_budget=20000.0)


def seed():
    init_db()
    db = SessionLocal()
    try:
        added = seed_categories(db)
        print(f"Seeded {added} categories." if added else "Categories already exist. Skipping.")
        if seed_demo_user(db):
            print("Created demo user (demo / demo123).")
        else:
            print("Demo user already exists. Skipping.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
