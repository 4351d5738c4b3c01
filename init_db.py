"""
Initialize the database and create the value_records table
Safe to run more than once: existing rows are left untouched
"""

from app import create_app
from services.store_service import StoreService


def init_db():
    """Initialize the database"""
    app = create_app('development')

    with app.app_context():
        print("Creating value_records table (if missing)...")
        StoreService.initialize()
        print(f"Database location: {app.config['SQLALCHEMY_DATABASE_URI']}")
        print(f"Records stored: {StoreService.count()}")


if __name__ == '__main__':
    init_db()
