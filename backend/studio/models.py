# backend/studio/models.py

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class DateOverrides(Base):
    __tablename__ = 'date_overrides'

    date = Column(Date, nullable=False, unique=True)
    is_closed = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    custom_price = Column(Float)  # NULL = tier price
    reason = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class OccupiedSlots(Base):
    __tablename__ = 'occupied_slots'
    # one booking per slot; concurrent inserts are settled by this constraint
    __table_args__ = (
        UniqueConstraint('date', 'start_time'),
    )

    date = Column(Date, nullable=False)
    start_time = Column(Text, nullable=False)  # "HH:MM"
    end_time = Column(Text, nullable=False)    # "HH:MM:SS"
    id = Column(Integer, primary_key=True)
    reservation_ref = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class DiscountCodes(Base):
    __tablename__ = 'discount_codes'

    code = Column(Text, nullable=False, unique=True)
    discount_percentage = Column(Float, nullable=False)
    valid_from = Column(Date, nullable=False)
    valid_until = Column(Date, nullable=False)
    max_uses = Column(Integer, server_default=text('100'))
    current_uses = Column(Integer, nullable=False, server_default=text('0'))
    active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    uses = relationship('DiscountCodeUses', back_populates='discount_code', cascade='all, delete-orphan')


class DiscountCodeUses(Base):
    __tablename__ = 'discount_code_uses'
    __table_args__ = (
        UniqueConstraint('discount_code_id', 'email'),
    )

    discount_code_id = Column(ForeignKey('discount_codes.id', ondelete='CASCADE'), nullable=False)
    email = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    reservation_ref = Column(Text)
    used_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    discount_code = relationship('DiscountCodes', back_populates='uses')
