"""
Database initialization script
Run this after creating the database to create tables and seed one
administrator and one staff account.
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app, db
from models.user import Admin, Staff
from utils.tokens import find_account


def seed_account(model, email, password, full_name):
    """Create an account unless one with this email already exists for the role"""
    existing = model.query.filter(db.func.lower(model.email) == email.lower()).first()
    if existing:
        print(f"  - {model.__name__} {email} already exists")
        return existing

    account = model(email=email, password=password, full_name=full_name)
    db.session.add(account)
    print(f"  ✓ {model.__name__} {email} created")
    return account


def seed_users():
    """Create default users"""
    print("Creating default users...")

    seed_account(
        Admin,
        os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'),
        os.getenv('SEED_ADMIN_PASSWORD', 'admin123'),
        'Administrator',
    )
    seed_account(
        Staff,
        os.getenv('SEED_STAFF_EMAIL', 'staff1@example.com'),
        os.getenv('SEED_STAFF_PASSWORD', 'staff123'),
        'Staff Member',
    )

    db.session.commit()


def init_db():
    """Initialize database with default data"""
    with app.app_context():
        print("\n" + "="*50)
        print("Back Office - Database Initialization")
        print("="*50 + "\n")

        # Create tables
        print("Creating database tables...")
        db.create_all()
        print("  ✓ Tables created\n")

        # Seed data
        seed_users()

        admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
        account = find_account(admin_email)
        print("\n" + "="*50)
        print("Database initialization complete!")
        print("="*50)
        if account is not None:
            print(f"\nLogin as {account.email} ({account.role}) to get started.")
        print()


if __name__ == '__main__':
    init_db()
