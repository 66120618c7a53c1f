from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker
from careops.database import SessionLocal, get_db
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway


def get_gateway(db: Session = Depends(get_db)) -> StoreGateway:
    return StoreGateway(db)


def get_channels() -> NotificationChannels:
    return NotificationChannels()


def get_session_factory() -> sessionmaker:
    """Session factory for jobs that open one session per run, like the all-workspace scan."""
    return SessionLocal
