"""Customer store models."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import (Boolean, Column, ForeignKey, Integer, String,
                        text)
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


class DBCustomer(db.Model):  # type: ignore
    """
    Storefront customer.

    ``login`` holds the LoginRadius UID once the customer is linked, and is
    unique: the store rejects a second customer with the same login.
    """

    __tablename__ = 'customers'

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    login = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), index=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    loginradius_id = Column(String(255))
    """The ``ID`` of the LoginRadius account."""
    loginradius_uid = Column(String(255), index=True)
    """The ``Uid`` of the LoginRadius account."""
    created = Column(Integer, nullable=False, server_default=text("'0'"))
    last_login = Column(Integer, nullable=False, server_default=text("'0'"))
    remember_me = Column(Boolean, nullable=False, default=False)

    credentials = relationship('DBCustomerCredential', uselist=False,
                               back_populates='customer',
                               cascade='all, delete-orphan')


class DBCustomerCredential(db.Model):  # type: ignore
    """Local password for a customer. Required by the store, never used."""

    __tablename__ = 'customer_credentials'

    customer_id = Column(ForeignKey('customers.customer_id'), primary_key=True)
    password_enc = Column(String(255), nullable=False, default='')
    reset_token = Column(String(64))
    reset_token_expires = Column(Integer, nullable=False, default=0)

    customer = relationship('DBCustomer', back_populates='credentials')
