from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

# UTC with microseconds: string order of created_at is creation order
UTC_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
_SQLITE_UTC_NOW = text("(strftime('%Y-%m-%d %H:%M:%f', 'now'))")


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(UTC_TIMESTAMP_FORMAT)


class Pilots(Base):
    __tablename__ = 'pilots'

    display_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, server_default=text("'pilot'"))
    id = Column(Integer, primary_key=True)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    availability = relationship('PilotAvailability', back_populates='pilot')
    bookings = relationship('Bookings', back_populates='pilot')


class PilotAvailability(Base):
    __tablename__ = 'pilot_availability'
    __table_args__ = (
        UniqueConstraint('pilot_id', 'day', 'time_slot'),
    )

    pilot_id = Column(ForeignKey('pilots.id', ondelete='CASCADE'), nullable=False)
    day = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)

    pilot = relationship('Pilots', back_populates='availability')


class Tags(Base):
    __tablename__ = 'tags'

    name = Column(Text, nullable=False, unique=True)
    color = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)

    bookings = relationship('Bookings', back_populates='tag')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint('number_of_people >= 1'),
    )

    name = Column(Text, nullable=False)
    pickup_location = Column(Text, nullable=False)
    number_of_people = Column(Integer, nullable=False, server_default=text('1'))
    booking_date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False, default=utc_now, server_default=_SQLITE_UTC_NOW)
    updated_at = Column(Text, nullable=False, default=utc_now, server_default=_SQLITE_UTC_NOW)
    id = Column(Integer, primary_key=True)
    pilot_id = Column(ForeignKey('pilots.id', ondelete='SET NULL'))  # unassigned when null
    tag_id = Column(ForeignKey('tags.id', ondelete='SET NULL'))
    phone = Column(Text)
    email = Column(Text)

    pilot = relationship('Pilots', back_populates='bookings')
    tag = relationship('Tags', back_populates='bookings')
