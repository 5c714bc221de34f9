"""API router for household members."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from familytodo.database import get_db
from familytodo.routers.realtime import PERSON_CREATED, PERSON_DELETED, PERSON_UPDATED, publish
from familytodo.schemas.person import PersonCreate, PersonResponse, PersonUpdate
from familytodo.services.person_service import PersonService

router = APIRouter()


def _dump(person) -> dict:
    return PersonResponse.model_validate(person).model_dump(mode="json")


@router.post("/", response_model=PersonResponse, status_code=status.HTTP_201_CREATED)
def create_person(person: PersonCreate, db: Session = Depends(get_db)) -> PersonResponse:
    """Create a new person."""
    created = PersonService.create_person(db, person)
    payload = _dump(created)
    publish(PERSON_CREATED, payload)
    return payload


@router.get("/", response_model=list[PersonResponse])
def list_people(db: Session = Depends(get_db)) -> list[PersonResponse]:
    """List all people."""
    people = PersonService.get_all_people(db)
    return [PersonResponse.model_validate(person) for person in people]


@router.get("/{person_id}", response_model=PersonResponse)
def get_person(person_id: int, db: Session = Depends(get_db)) -> PersonResponse:
    """Get a single person."""
    person = PersonService.get_person(db, person_id)
    if not person:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    return PersonResponse.model_validate(person)


@router.put("/{person_id}", response_model=PersonResponse)
def update_person(person_id: int, person_update: PersonUpdate, db: Session = Depends(get_db)) -> PersonResponse:
    """Update a person."""
    person = PersonService.update_person(db, person_id, person_update)
    if not person:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    payload = _dump(person)
    publish(PERSON_UPDATED, payload)
    return payload


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(person_id: int, db: Session = Depends(get_db)) -> None:
    """Remove a person."""
    success = PersonService.delete_person(db, person_id)
    if not success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    publish(PERSON_DELETED, {"id": person_id})
