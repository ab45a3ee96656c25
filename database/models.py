"""
Database models for the host application tables read by the dashboard

The dashboard never writes to these tables. They belong to the learning
platform and its booking plugin; the models mirror the columns the
shortcodes and the teacher page query.
"""

from sqlalchemy import DECIMAL, BigInteger, Column, ForeignKey, Index, Integer, SmallInteger, String, Text
from sqlalchemy.orm import relationship

from database.base import Base


class User(Base):
    """Platform user (learners and teachers alike)"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    firstname = Column(String(100), nullable=False, default="")
    lastname = Column(String(100), nullable=False, default="")
    email = Column(String(255))
    description = Column(Text)
    picture = Column(Integer, nullable=False, default=0)  # 0 means no uploaded picture


class BookingInstance(Base):
    """A booking activity placed in a course, addressed by its course module id"""

    __tablename__ = "booking"

    id = Column(Integer, primary_key=True)
    cmid = Column(Integer, nullable=False, unique=True)
    course = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)

    options = relationship("BookingOption", back_populates="instance")


class BookingOption(Base):
    """A bookable course offering inside a booking instance"""

    __tablename__ = "booking_options"

    id = Column(Integer, primary_key=True)
    bookingid = Column(Integer, ForeignKey("booking.id"), nullable=False)
    text = Column(String(255), nullable=False)
    description = Column(Text)
    location = Column(String(255))
    sport = Column(String(100))
    category = Column(String(100))
    dayofweektime = Column(String(100))
    coursestarttime = Column(BigInteger)  # unix timestamp
    courseendtime = Column(BigInteger)  # unix timestamp
    maxanswers = Column(Integer, nullable=False, default=0)
    maxoverbooking = Column(Integer, nullable=False, default=0)
    price = Column(DECIMAL(10, 2))
    currency = Column(String(3), default="EUR")
    imageurl = Column(String(512))
    invisible = Column(SmallInteger, nullable=False, default=0)

    instance = relationship("BookingInstance", back_populates="options")

    __table_args__ = (
        Index("idx_booking_options_bookingid", "bookingid"),
        Index("idx_booking_options_category", "category"),
    )


class BookingTeacher(Base):
    """Assignment of a teacher to a booking option"""

    __tablename__ = "booking_teachers"

    id = Column(Integer, primary_key=True)
    bookingid = Column(Integer, ForeignKey("booking.id"), nullable=False)
    optionid = Column(Integer, ForeignKey("booking_options.id"), nullable=False)
    userid = Column(Integer, ForeignKey("users.id"), nullable=False)

    __table_args__ = (Index("idx_booking_teachers_userid", "userid"),)


class BookingAnswer(Base):
    """A user's booking of an option; waitinglist=0 means a confirmed place"""

    __tablename__ = "booking_answers"

    id = Column(Integer, primary_key=True)
    bookingid = Column(Integer, ForeignKey("booking.id"), nullable=False)
    optionid = Column(Integer, ForeignKey("booking_options.id"), nullable=False)
    userid = Column(Integer, ForeignKey("users.id"), nullable=False)
    waitinglist = Column(SmallInteger, nullable=False, default=0)

    __table_args__ = (Index("idx_booking_answers_optionid", "optionid"),)


class Enrol(Base):
    """Enrolment method instance of a course"""

    __tablename__ = "enrol"

    id = Column(Integer, primary_key=True)
    courseid = Column(Integer, nullable=False)


class UserEnrolment(Base):
    """Enrolment of a user through an enrolment method; status 0 is active"""

    __tablename__ = "user_enrolments"

    id = Column(Integer, primary_key=True)
    enrolid = Column(Integer, ForeignKey("enrol.id"), nullable=False)
    userid = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(SmallInteger, nullable=False, default=0)
