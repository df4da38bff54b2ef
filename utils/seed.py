from __future__ import annotations

from datetime import date

from models import EnrollmentStatus, FeeRecord, FeeStatus, GradeEntry, StudentRecord
from utils.records import InstitutionStore

S1, S2 = "Semestre 1", "Semestre 2"

STUDENTS = [
    StudentRecord(
        id="1",
        matriculation_number="2024001",
        first_name="Ibrahim",
        last_name="Koné",
        email="ibrahim.kone@supptic.edu",
        phone="+225 07 12 34 56 78",
        program="Réseaux et Télécommunications",
        level="Licence 3",
        enrollment_status=EnrollmentStatus.ACTIVE,
        enrollment_date=date(2022, 9, 15),
        date_of_birth=date(2002, 3, 15),
        address="Abidjan, Cocody",
        nationality="Ivoirienne",
        gender="Masculin",
    ),
    StudentRecord(
        id="2",
        matriculation_number="2024002",
        first_name="Fatou",
        last_name="Diallo",
        email="fatou.diallo@supptic.edu",
        phone="+225 05 98 76 54 32",
        program="Génie Logiciel",
        level="Master 1",
        enrollment_status=EnrollmentStatus.ACTIVE,
        enrollment_date=date(2021, 9, 10),
    ),
    StudentRecord(
        id="3",
        matriculation_number="2024003",
        first_name="Mariama",
        last_name="Bah",
        email="mariama.bah@supptic.edu",
        phone="+225 01 23 45 67 89",
        program="Cybersécurité",
        level="Licence 2",
        enrollment_status=EnrollmentStatus.ACTIVE,
        enrollment_date=date(2023, 9, 12),
    ),
    StudentRecord(
        id="4",
        matriculation_number="2024004",
        first_name="Amadou",
        last_name="Traoré",
        email="amadou.traore@supptic.edu",
        phone="+225 07 11 22 33 44",
        program="Systèmes Informatiques",
        level="Licence 1",
        enrollment_status=EnrollmentStatus.ACTIVE,
        enrollment_date=date(2024, 9, 5),
    ),
    StudentRecord(
        id="5",
        matriculation_number="2024005",
        first_name="Aïcha",
        last_name="Camara",
        email="aicha.camara@supptic.edu",
        phone="+225 05 44 55 66 77",
        program="Réseaux et Télécommunications",
        level="Master 2",
        enrollment_status=EnrollmentStatus.ACTIVE,
        enrollment_date=date(2020, 9, 8),
    ),
]

GRADES = [
    GradeEntry("1", "Réseaux Informatiques", 16.5, 4, S1),
    GradeEntry("1", "Sécurité Réseau", 14.0, 3, S1),
    GradeEntry("1", "Programmation Système", 15.5, 3, S1),
    GradeEntry("1", "Architecture des Systèmes", 13.0, 2, S1),
    GradeEntry("1", "Télécommunications", 17.0, 4, S2),
    GradeEntry("1", "Administration Réseau", 16.0, 3, S2),
    GradeEntry("2", "Architecture Logicielle", 15.5, 4, S1),
    GradeEntry("2", "Bases de Données Avancées", 16.0, 3, S1),
    GradeEntry("2", "Gestion de Projet", 14.5, 2, S1),
    GradeEntry("3", "Cryptographie", 13.5, 4, S2),
    GradeEntry("3", "Sécurité des Systèmes", 14.0, 3, S2),
    GradeEntry("3", "Droit du Numérique", 12.0, 2, S2),
    GradeEntry("4", "Algorithmique", 9.0, 4, S1),
    GradeEntry("4", "Mathématiques", 8.5, 3, S1),
    GradeEntry("4", "Introduction aux Réseaux", 11.0, 2, S1),
    GradeEntry("5", "Réseaux Mobiles", 16.5, 4, S2),
    GradeEntry("5", "Virtualisation", 16.0, 3, S2),
    GradeEntry("5", "Mémoire de Fin d'Études", 17.0, 4, S2),
]

# Labels kept as recorded; record 3 is "late" with nothing paid
FEES = [
    FeeRecord("1", "1", "Ibrahim Koné", "2024001", "Réseaux et Télécommunications", "Licence 3",
              850000, 850000, FeeStatus.PAID, date(2024, 10, 15), date(2024, 9, 20)),
    FeeRecord("2", "2", "Fatou Diallo", "2024002", "Génie Logiciel", "Master 1",
              1200000, 600000, FeeStatus.PARTIAL, date(2024, 11, 30), date(2024, 10, 5)),
    FeeRecord("3", "3", "Mariama Bah", "2024003", "Cybersécurité", "Licence 2",
              750000, 0, FeeStatus.LATE, date(2024, 9, 30)),
    FeeRecord("4", "4", "Amadou Traoré", "2024004", "Systèmes Informatiques", "Licence 1",
              700000, 700000, FeeStatus.PAID, date(2024, 10, 20), date(2024, 9, 15)),
    FeeRecord("5", "5", "Aïcha Camara", "2024005", "Réseaux et Télécommunications", "Master 2",
              1300000, 0, FeeStatus.UNPAID, date(2024, 12, 15)),
]


def load_reference_data(store: InstitutionStore) -> InstitutionStore:
    for s in STUDENTS:
        store.add_student(s)
    store.add_grades(GRADES)
    for r in FEES:
        store.add_fee_record(r)
    return store
