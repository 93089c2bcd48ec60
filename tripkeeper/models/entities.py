"""
Data entity model definitions
One model per stored collection, plus the records embedded in them
"""

import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from .base import BaseModel, Record

DEFAULT_ALBUM_COVER = "/default-album-cover.jpg"
VIDEO_THUMBNAIL = "/video-thumbnail.jpg"


# ============ Enumerations ============


class TripStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityCategory(str, Enum):
    SIGHTSEEING = "sightseeing"
    ACTIVITY = "activity"
    TRANSPORTATION = "transportation"
    ACCOMMODATION = "accommodation"
    MEAL = "meal"
    OTHER = "other"


class AccommodationType(str, Enum):
    HOTEL = "hotel"
    HOSTEL = "hostel"
    APARTMENT = "apartment"
    RESORT = "resort"
    GUESTHOUSE = "guesthouse"
    AIRBNB = "airbnb"


class BookingStatus(str, Enum):
    """Status shared by accommodation and meal bookings"""

    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class TransportationType(str, Enum):
    FLIGHT = "flight"
    TRAIN = "train"
    RENTAL_CAR = "rental_car"
    TAXI = "taxi"
    CHARTER = "charter"
    FERRY = "ferry"
    BUS = "bus"
    SUBWAY = "subway"
    OTHER = "other"


class TransportationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    BRUNCH = "brunch"
    TEABREAK = "teabreak"
    SNACK = "snack"


class DocumentType(str, Enum):
    PASSPORT = "passport"
    ID_CARD = "id_card"
    DRIVER_LICENSE = "driver_license"
    OTHER = "other"


class OwnerType(str, Enum):
    PRIMARY = "primary"  # The app's own user
    COMPANION = "companion"  # Owner is a row in the companions collection


class VisaType(str, Enum):
    TOURIST = "tourist"
    BUSINESS = "business"
    STUDENT = "student"
    WORK = "work"
    TRANSIT = "transit"
    OTHER = "other"


class VisaEntries(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    MULTIPLE = "multiple"


class VisaStatus(str, Enum):
    PREPARING = "preparing"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"


class MediaType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


# ============ Trip ============


class Trip(Record):
    """Trip model - top-level container the other collections point at"""

    title: str
    destination: str
    country: str = ""
    start_date: datetime.date
    end_date: datetime.date
    status: TripStatus = TripStatus.UPCOMING
    description: Optional[str] = None
    budget: Optional[float] = None
    currency: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_date_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


# ============ Itinerary ============


class Activity(BaseModel):
    """Activity embedded in an itinerary day"""

    id: str
    start_time: str = ""  # HH:MM
    end_time: str = ""
    title: str
    description: str = ""
    location: str = ""
    address: Optional[str] = None
    cost: Optional[float] = None
    currency: Optional[str] = None
    category: ActivityCategory = ActivityCategory.OTHER
    notes: Optional[str] = None


class ItineraryDay(Record):
    """Itinerary day - one dated page of a trip"""

    trip_id: str
    date: datetime.date
    day_number: int = Field(default=1, ge=1)
    title: str = ""
    description: str = ""
    activities: List[Activity] = Field(default_factory=list)
    accommodation_id: Optional[str] = None
    transportation_ids: List[str] = Field(default_factory=list)
    meal_ids: List[str] = Field(default_factory=list)

    def sorted_activities(self) -> List[Activity]:
        """Activities in start-time order; untimed ones last"""
        return sorted(self.activities, key=lambda a: (not a.start_time, a.start_time))


# ============ Accommodation ============


class Accommodation(Record):
    trip_id: str = ""
    itinerary_day_id: Optional[str] = None
    type: AccommodationType = AccommodationType.HOTEL
    name: str
    address: str = ""
    description: Optional[str] = None
    check_in_date: str = ""
    check_out_date: str = ""
    check_in_time: str = ""
    check_out_time: str = ""
    status: BookingStatus = BookingStatus.PENDING
    price_per_night: float = 0
    total_price: float = 0
    currency: str = ""
    booking_reference: Optional[str] = None
    booking_platform: Optional[str] = None
    room_type: Optional[str] = None
    number_of_guests: Optional[int] = None
    includes_breakfast: Optional[bool] = None
    notes: Optional[str] = None


# ============ Transportation ============


class FlightDetails(BaseModel):
    airline: str = ""
    flight_number: str = ""
    departure_terminal: Optional[str] = None
    arrival_terminal: Optional[str] = None
    cabin: str = "economy"
    baggage_allowance: Optional[str] = None
    seat_number: Optional[str] = None


class TrainDetails(BaseModel):
    train_number: str = ""
    departure_station: str = ""
    arrival_station: str = ""
    train_type: Optional[str] = None
    car_number: Optional[str] = None
    seat_number: Optional[str] = None
    seat_class: Optional[str] = None
    platform: Optional[str] = None


class RentalCarDetails(BaseModel):
    company: str = ""
    vehicle_type: str = ""
    model: Optional[str] = None
    pickup_location: str = ""
    dropoff_location: str = ""
    pickup_date_time: str = ""
    dropoff_date_time: str = ""
    rental_days: int = 0
    license_plate: Optional[str] = None


class TaxiDetails(BaseModel):
    company: Optional[str] = None
    driver_name: Optional[str] = None
    driver_contact: Optional[str] = None
    license_plate: Optional[str] = None
    estimated_distance: Optional[float] = None
    distance_unit: Optional[str] = None
    pre_booked: bool = False


class CharterDetails(BaseModel):
    company: str = ""
    driver_name: Optional[str] = None
    vehicle_type: str = ""
    passenger_capacity: int = 0
    contract_number: Optional[str] = None
    duration_hours: float = 0
    is_full_day: bool = False


class FerryDetails(BaseModel):
    company: str = ""
    vessel_name: Optional[str] = None
    departure_port: str = ""
    arrival_port: str = ""
    cabin_type: Optional[str] = None
    cabin_number: Optional[str] = None


class BusDetails(BaseModel):
    company: str = ""
    bus_number: str = ""
    departure_station: str = ""
    arrival_station: str = ""
    seat_number: Optional[str] = None


class SubwayDetails(BaseModel):
    line: str = ""
    departure_station: str = ""
    arrival_station: str = ""
    transfer_stations: List[str] = Field(default_factory=list)
    ticket_type: Optional[str] = None


# transportation type -> name of the detail field that may be populated
DETAIL_FIELDS: Dict[str, str] = {
    TransportationType.FLIGHT.value: "flight_details",
    TransportationType.TRAIN.value: "train_details",
    TransportationType.RENTAL_CAR.value: "rental_car_details",
    TransportationType.TAXI.value: "taxi_details",
    TransportationType.CHARTER.value: "charter_details",
    TransportationType.FERRY.value: "ferry_details",
    TransportationType.BUS.value: "bus_details",
    TransportationType.SUBWAY.value: "subway_details",
    TransportationType.OTHER.value: "other_details",
}


class Transportation(Record):
    """Transportation leg with at most one type-specific detail record"""

    trip_id: str
    itinerary_day_id: Optional[str] = None
    type: TransportationType
    title: str = ""
    departure_date_time: str = ""
    arrival_date_time: str = ""
    departure_location: str = ""
    arrival_location: str = ""
    price: float = 0
    currency: str = ""
    status: TransportationStatus = TransportationStatus.PENDING
    booking_reference: Optional[str] = None
    confirmation_number: Optional[str] = None
    notes: Optional[str] = None

    flight_details: Optional[FlightDetails] = None
    train_details: Optional[TrainDetails] = None
    rental_car_details: Optional[RentalCarDetails] = None
    taxi_details: Optional[TaxiDetails] = None
    charter_details: Optional[CharterDetails] = None
    ferry_details: Optional[FerryDetails] = None
    bus_details: Optional[BusDetails] = None
    subway_details: Optional[SubwayDetails] = None
    other_details: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _check_details_match_type(self):
        populated = [
            field for field in DETAIL_FIELDS.values() if getattr(self, field) is not None
        ]
        if len(populated) > 1:
            raise ValueError(f"only one detail record may be set, got {populated}")
        if populated and populated[0] != DETAIL_FIELDS[self.type]:
            raise ValueError(
                f"{populated[0]} does not match transportation type '{self.type}'"
            )
        return self

    @property
    def details(self) -> Optional[Any]:
        return getattr(self, DETAIL_FIELDS[self.type])


# ============ Meal ============


class DietaryOptions(BaseModel):
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    nut_free: bool = False
    dairy_free: bool = False
    other: Optional[str] = None


class Meal(Record):
    trip_id: str
    itinerary_day_id: Optional[str] = None
    type: MealType
    restaurant_name: str
    category: str = "other"
    address: str = ""
    reservation_time: str = ""
    status: BookingStatus = BookingStatus.PENDING
    reservation_number: Optional[str] = None
    number_of_people: int = Field(default=1, ge=1)
    estimated_cost: Optional[float] = None
    currency: Optional[str] = None
    dietary_options: DietaryOptions = Field(default_factory=DietaryOptions)
    special_requests: Optional[str] = None
    notes: Optional[str] = None


# ============ Documents ============


class Companion(Record):
    name: str
    relationship: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class PersonalDocument(Record):
    """Identity document; document_image holds an obfuscated data URL"""

    type: DocumentType = DocumentType.PASSPORT
    number: str = ""
    name: str = ""
    issue_date: str = ""
    expiry_date: str = ""
    issuing_country: str = ""
    notes: str = ""
    document_image: Optional[str] = None
    owner_type: OwnerType = OwnerType.PRIMARY
    owner_id: str = ""


class TravelVisa(Record):
    trip_id: str
    country: str
    visa_type: VisaType = VisaType.TOURIST
    number: str = ""
    issue_date: str = ""
    expiry_date: str = ""
    duration: int = 30  # Days of stay
    entries: VisaEntries = VisaEntries.SINGLE
    status: VisaStatus = VisaStatus.PREPARING
    application_date: Optional[str] = None
    approval_date: Optional[str] = None
    document_image: Optional[str] = None
    notes: str = ""


# ============ Albums ============


class Album(Record):
    """Album - item_count and cover_url are aggregates of its media partition"""

    trip_id: str = ""
    title: str
    description: Optional[str] = None
    cover_url: str = DEFAULT_ALBUM_COVER
    item_count: int = Field(default=0, ge=0)


class Media(Record):
    album_id: str
    type: MediaType
    url: str
    thumbnail: str = ""
    title: str = ""
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
