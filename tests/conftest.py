import datetime

import pytest
from sqlalchemy.orm import Session

from tradelog.clock import FixedClock
from tradelog.config import TestingConfig
from tradelog.models import Base
from tradelog.services import OrderGateway

import factories

FIXED_INSTANT = datetime.datetime(2024, 3, 1, 9, 30, 15)


@pytest.fixture
def engine():
    engine = TestingConfig.get_engine()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def dbsession(engine):
    session = Session(bind=engine)
    for factory_class in (factories.CustomerFactory, factories.OrderFactory):
        factory_class._meta.sqlalchemy_session = session
    yield session
    session.close()


@pytest.fixture
def gateway(dbsession):
    return OrderGateway(dbsession)


@pytest.fixture
def clock():
    return FixedClock(FIXED_INSTANT)
