from prayer_alerts.db.session import engine
from prayer_alerts.models.kv import Base

def init_db():
    if engine is None:
        raise SystemExit("DATABASE_URL not configured")
    print("Initializing database...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created successfully!")

if __name__ == "__main__":
    init_db()
