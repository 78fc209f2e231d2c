from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .constants import (
    DEFAULT_COUNTRY,
    PLACEHOLDER_NAME,
    AssignmentStatus,
    AuthStatus,
    PatientStatus,
    Progress,
    Role,
    VisitStatus,
)
from .database import Base
from .shared.owner import Owner, owner_from_columns


class Auth(Base):
    """Credentials, session token and access level for one account"""

    __tablename__ = "auth"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)  # Email address
    password_hash = Column("password", String(128), nullable=False)  # bcrypt, or a legacy sha512 hex digest
    token = Column(Text, nullable=True)  # Null when no active session
    expiration = Column(BigInteger, nullable=True, index=True)  # Milliseconds since epoch
    role = Column(SmallInteger, default=int(Role.CAREGIVER), nullable=False, index=True)
    status = Column(SmallInteger, default=int(AuthStatus.INACTIVE), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="auth", uselist=False, cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == AuthStatus.ACTIVE

    @property
    def role_name(self) -> str:
        return Role(self.role).label

    @property
    def status_name(self) -> str:
        return AuthStatus(self.status).label


class User(Base):
    """Profile data; shares its primary key with Auth"""

    __tablename__ = "user"

    id = Column(Integer, ForeignKey("auth.id", ondelete="CASCADE"), primary_key=True)
    lastname = Column(String(90), default=PLACEHOLDER_NAME)
    firstname = Column(String(90), default=PLACEHOLDER_NAME)
    middlename = Column(String(60), nullable=True)
    birthdate = Column(Date, nullable=True)
    ssn = Column(Text, nullable=True)  # Fernet ciphertext
    code = Column(String(20), nullable=True, index=True)  # Upstream provider code
    phone = Column(String(20), nullable=True)
    phone2 = Column(String(20), nullable=True)
    email = Column(String(255), nullable=False, index=True)
    email2 = Column(String(255), nullable=True)
    languages = Column(Text, nullable=True)  # Comma-separated
    description = Column(Text, nullable=True)
    photo = Column(String(2048), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    auth = relationship("Auth", back_populates="user")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.firstname, self.middlename, self.lastname) if p)


class Patient(Base):
    __tablename__ = "patient"

    id = Column(Integer, primary_key=True, index=True)
    patient = Column(String(20), nullable=True)  # Upstream partner patient code
    admission = Column(String(20), nullable=True, index=True)  # Upstream partner admission code
    firstname = Column(String(100), nullable=False)
    middlename = Column(String(100), nullable=True)
    lastname = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    status = Column(SmallInteger, default=int(PatientStatus.ACTIVE), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == PatientStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.firstname, self.middlename, self.lastname) if p)


class Address(Base):
    """Street address owned by a user, a patient or the system"""

    __tablename__ = "address"

    id = Column(Integer, primary_key=True, index=True)
    person_id = Column(Integer, nullable=False, index=True)
    person_type = Column(SmallInteger, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    county = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zipcode = Column(String(5), nullable=False, index=True)
    country = Column(String(100), nullable=False, default=DEFAULT_COUNTRY)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def owner(self) -> Owner:
        return owner_from_columns(self.person_id, self.person_type)

    @owner.setter
    def owner(self, value: Owner) -> None:
        self.person_id, self.person_type = value.columns()

    @property
    def formatted(self) -> str:
        text = f"{self.address}\n{self.city}, {self.state} {self.zipcode}"
        if self.country and self.country != DEFAULT_COUNTRY:
            text += f"\n{self.country}"
        return text


class Visit(Base):
    """A caregiver's visit to a patient and its progress audit trail"""

    __tablename__ = "visit"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patient.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    note = Column(Text, nullable=True)

    # Workflow: scheduled -> in progress (check-in) -> completed (check-out) -> paid (approved)
    # scheduled/in progress may also become canceled, which is terminal
    progress = Column(SmallInteger, default=int(Progress.SCHEDULED), nullable=False, index=True)
    status = Column(SmallInteger, default=int(VisitStatus.ACTIVE), nullable=False, index=True)

    # Who moved the visit through each stage
    scheduled_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    checkin_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    checkout_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    canceled_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    approved_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    # ...and when
    checkin_at = Column(DateTime, nullable=True)
    checkout_at = Column(DateTime, nullable=True)
    canceled_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
    patient = relationship("Patient")

    @property
    def is_active(self) -> bool:
        return self.status == VisitStatus.ACTIVE

    @property
    def duration_minutes(self) -> int:
        if not self.start_time or not self.end_time:
            return 0
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def progress_description(self) -> str:
        try:
            return Progress(self.progress).label
        except ValueError:
            return "Unknown"


class UserPatient(Base):
    """Assignment of a caregiver to a patient"""

    __tablename__ = "user_patient"

    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    patient_id = Column(Integer, ForeignKey("patient.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(DateTime, server_default=func.now())
    assigned_by = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    status = Column(SmallInteger, default=int(AssignmentStatus.ACTIVE), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
    patient = relationship("Patient")

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE
