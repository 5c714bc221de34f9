"""Service for managing household members."""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from familytodo.models.person import Person
from familytodo.services.time_manager import get_current_time

if TYPE_CHECKING:
    from familytodo.schemas.person import PersonCreate, PersonUpdate


class PersonService:
    """Business logic for people."""

    @staticmethod
    def create_person(db: Session, person_data: "PersonCreate") -> Person:
        payload = person_data.model_dump()
        if payload.get("email") == "":
            payload["email"] = None
        person = Person(**payload)
        db.add(person)
        db.commit()
        db.refresh(person)
        return person

    @staticmethod
    def get_person(db: Session, person_id: int) -> Person | None:
        return db.query(Person).filter(Person.id == person_id, Person.deleted.is_(False)).first()

    @staticmethod
    def get_all_people(db: Session) -> list[Person]:
        return db.query(Person).filter(Person.deleted.is_(False)).order_by(Person.name).all()

    @staticmethod
    def update_person(db: Session, person_id: int, person_data: "PersonUpdate") -> Person | None:
        person = PersonService.get_person(db, person_id)
        if not person:
            return None
        update_data = person_data.model_dump(exclude_unset=True)
        if update_data.get("email") == "":
            update_data["email"] = None
        for key, value in update_data.items():
            setattr(person, key, value)
        db.commit()
        db.refresh(person)
        return person

    @staticmethod
    def delete_person(db: Session, person_id: int) -> bool:
        """Soft delete a person. Existing assignments stay in place."""
        person = PersonService.get_person(db, person_id)
        if not person:
            return False
        person.deleted = True
        person.deleted_at = get_current_time()
        db.commit()
        return True
