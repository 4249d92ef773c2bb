#!/usr/bin/env python3
"""
Initialize the database with tables and the default pricing plans.
"""

from app.database import engine, SessionLocal, Base
from app.models.subscription import PricingPlan
from app.services.membership import BASE_FEATURES, ADVANCED_FEATURES, PRO_FEATURES
import structlog

logger = structlog.get_logger()

DEFAULT_PLANS = [
    {
        "name": "Free",
        "description": "Get started with basic video feedback",
        "monthly_price": 0,
        "yearly_price": 0,
        "features": BASE_FEATURES,
        "analysis_limit": 3,
        "display_order": 1,
    },
    {
        "name": "Advanced",
        "description": "Regular feedback for improving players",
        "monthly_price": 19.99,
        "yearly_price": 199.99,
        "features": ADVANCED_FEATURES,
        "analysis_limit": 20,
        "display_order": 2,
    },
    {
        "name": "Pro",
        "description": "Unlimited analysis and weekly coaching",
        "monthly_price": 49.99,
        "yearly_price": 499.99,
        "features": PRO_FEATURES,
        "analysis_limit": 0,
        "display_order": 3,
    },
]


def init_database():
    """Initialize the database with tables."""
    try:
        # Import all models to ensure they're registered
        from app.models import profile, video, coach, subscription, analysis, dashboard, community

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        seed_pricing_plans()

    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise


def seed_pricing_plans():
    """Insert any default plan that is not there yet."""
    db = SessionLocal()

    try:
        existing = {name for (name,) in db.query(PricingPlan.name).all()}
        created = 0
        for plan in DEFAULT_PLANS:
            if plan["name"] in existing:
                continue
            db.add(PricingPlan(**plan))
            created += 1
        db.commit()

        logger.info("Pricing plans seeded", created=created, skipped=len(DEFAULT_PLANS) - created)

    except Exception as e:
        db.rollback()
        logger.error("Failed to seed pricing plans", error=str(e))
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_database()
    print("Database initialized successfully!")
