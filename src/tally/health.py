"""
Health records domain model.

Defines Patient and Prescription records and the HealthSystem that keeps one
registry of each, plus a patient-id index over the prescriptions.
"""

import datetime
import typing

from dataclasses import dataclass

from .registry import InvalidValueError, NotFoundError, TypedRegistry, build_index

MAX_AGE = 150


@dataclass(frozen=True)
class Patient:
    """
    A registered patient.

    Attributes:
        id: Unique patient identifier.
        name: Full name, non-empty.
        age: Age in whole years, 0 to MAX_AGE inclusive.
        gender: Free-text gender, non-empty.
    """

    id: int
    name: str
    age: int
    gender: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise InvalidValueError("Name cannot be empty")
        if not self.gender or not self.gender.strip():
            raise InvalidValueError("Gender cannot be empty")
        if self.age < 0:
            raise InvalidValueError("Age cannot be negative")
        if self.age > MAX_AGE:
            raise InvalidValueError(f"Age cannot exceed {MAX_AGE}")

    def __str__(self) -> str:
        return f"Patient Id: {self.id}, Name: {self.name}, Age: {self.age}, Gender: {self.gender}"


@dataclass(frozen=True)
class Prescription:
    """
    A medication issued to a patient.

    Attributes:
        id: Unique prescription identifier.
        patient_id: Identifier of the patient it was issued to.
        medication_name: Medication, non-empty.
        date_issued: Day the prescription was issued.
    """

    id: int
    patient_id: int
    medication_name: str
    date_issued: datetime.date

    def __post_init__(self):
        if not self.medication_name or not self.medication_name.strip():
            raise InvalidValueError("Medication name cannot be empty")

    def __str__(self) -> str:
        return (
            f"Prescription Id: {self.id}, Medication: {self.medication_name}, "
            f"Date Issued: {self.date_issued:%Y-%m-%d}"
        )


class HealthSystem:
    def __init__(self):
        self.patients: TypedRegistry[int, Patient] = TypedRegistry(name="patients")
        self.prescriptions: TypedRegistry[int, Prescription] = TypedRegistry(name="prescriptions")
        self._prescription_map: typing.Dict[int, typing.List[Prescription]] = {}

    def add_patient(self, patient: Patient) -> None:
        self.patients.add(patient)

    def add_prescription(self, prescription: Prescription) -> None:
        """Store a prescription; the patient it names must already be registered."""
        if prescription.patient_id not in self.patients:
            raise NotFoundError(
                prescription.patient_id,
                f"Prescription {prescription.id} refers to unknown patient {prescription.patient_id!r}.",
            )
        self.prescriptions.add(prescription)

    def remove_patient(self, patient_id: int) -> None:
        """Remove a patient together with every prescription issued to them."""
        self.patients.remove(patient_id)
        for prescription in self.prescriptions.list():
            if prescription.patient_id == patient_id:
                self.prescriptions.remove(prescription.id)

    def build_prescription_map(self) -> typing.Dict[int, typing.List[Prescription]]:
        # snapshot; call again after prescriptions change
        self._prescription_map = build_index(self.prescriptions.list(), lambda p: p.patient_id)
        return self._prescription_map

    def prescriptions_for(self, patient_id: int) -> typing.List[Prescription]:
        return list(self._prescription_map.get(patient_id, []))

    def find_patient(self, patient_id: int) -> typing.Optional[Patient]:
        return self.patients.find(lambda p: p.id == patient_id)


def seed_health_system(system: HealthSystem, today: typing.Optional[datetime.date] = None) -> None:
    today = today or datetime.date.today()
    days = datetime.timedelta
    system.add_patient(Patient(1, "Alice Smith", 29, "Female"))
    system.add_patient(Patient(2, "Bob Johnson", 47, "Male"))
    system.add_patient(Patient(3, "Carol Williams", 35, "Female"))

    system.add_prescription(Prescription(1, 1, "Amoxicillin", today - days(days=10)))
    system.add_prescription(Prescription(2, 1, "Ibuprofen", today - days(days=5)))
    system.add_prescription(Prescription(3, 2, "Atorvastatin", today - days(days=2)))
    system.add_prescription(Prescription(4, 3, "Metformin", today - days(days=7)))
    system.add_prescription(Prescription(5, 3, "Lisinopril", today - days(days=1)))
