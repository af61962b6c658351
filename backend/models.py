from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Document(BaseModel):
    """
    Base de los documentos de MongoDB: el esquema es flexible, así que se
    aceptan campos extra tal cual llegan del frontend.
    """
    model_config = ConfigDict(extra="allow")


class About(Document):
    title: Optional[str] = None
    content: Optional[str] = None


class Collection(Document):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class Service(Document):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class Hospital(Document):
    name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    beds: Optional[int] = None
    image: Optional[str] = None


class ProcedureCost(Document):
    procedure: Optional[str] = None
    minCost: Optional[float] = None
    maxCost: Optional[float] = None
    currency: Optional[str] = None


class PatientOpinion(Document):
    name: Optional[str] = None
    country: Optional[str] = None
    rating: Optional[int] = None
    opinion: Optional[str] = None


class Faq(Document):
    question: Optional[str] = None
    answer: Optional[str] = None
    category: Optional[str] = None


class Assistance(Document):
    title: Optional[str] = None
    description: Optional[str] = None


class Doctor(Document):
    name: Optional[str] = None
    specialty: Optional[str] = None
    hospitalId: Optional[str] = None
    experienceYears: Optional[int] = None
    image: Optional[str] = None


class Treatment(Document):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


class DoctorTreatment(Document):
    doctorId: Optional[str] = None
    treatmentId: Optional[str] = None
    cost: Optional[float] = None


class HospitalTreatment(Document):
    hospitalId: Optional[str] = None
    treatmentId: Optional[str] = None
    cost: Optional[float] = None


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Document):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    treatmentId: Optional[str] = None
    hospitalId: Optional[str] = None
    doctorId: Optional[str] = None
    preferredDate: Optional[date] = None
    status: BookingStatus = BookingStatus.PENDING
    message: Optional[str] = None


class Admin(Document):
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class Language(Document):
    code: Optional[str] = None
    name: Optional[str] = None


class Heading(Document):
    section: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None


class Blog(Document):
    title: Optional[str] = None
    slug: Optional[str] = None
    author: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    publishedAt: Optional[datetime] = None


class Patient(Document):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
