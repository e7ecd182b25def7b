"""
Tests unitaires pour le quota de renforts et l'enregistrement des effectifs.
Couverture : allocate, validation du triplet d'effectifs, cumul multi-soumissions,
idempotence par submission_key, consultation des renforts disponibles.
"""

import uuid
from types import SimpleNamespace

import pytest

from mealtrack.exceptions import NotFoundError, QuotaExceededError, ValidationError
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.attendance import AttendanceSubmit
from mealtrack.services.quota_service import (
    RECENT_SUBMISSION_KEYS,
    Headcount,
    allocate,
    complete_headcount,
    get_attendance,
    submit_attendance,
    validate_headcount,
)


def make_group(max_reinforcements=5):
    return SimpleNamespace(id=uuid.uuid4(), name="3A", max_reinforcements=max_reinforcements)


# ============================================================
# allocate
# ============================================================

class TestAllocate:
    def test_allocation_jusqu_au_plafond(self):
        assert allocate(make_group(5), 3, 2) == 5

    def test_plafond_atteint_quota_depasse(self):
        with pytest.raises(QuotaExceededError) as exc_info:
            allocate(make_group(5), 5, 1)
        assert exc_info.value.available == 0
        assert exc_info.value.details["available"] == 0

    def test_quota_depasse_indique_le_disponible(self):
        with pytest.raises(QuotaExceededError) as exc_info:
            allocate(make_group(5), 2, 4)
        assert exc_info.value.available == 3
        assert exc_info.value.details["requested"] == 4

    def test_delta_zero_accepte(self):
        assert allocate(make_group(5), 3, 0) == 3

    def test_delta_negatif_rejete(self):
        with pytest.raises(ValidationError, match="négatif"):
            allocate(make_group(5), 0, -1)

    def test_cumul_existant_negatif_rejete(self):
        with pytest.raises(ValidationError):
            allocate(make_group(5), -2, 1)

    def test_cumul_au_dessus_du_quota_tolere(self):
        """Cumul stocké > quota : disponible borné à 0, un delta nul reste accepté."""
        assert allocate(make_group(5), 7, 0) == 7
        with pytest.raises(QuotaExceededError) as exc_info:
            allocate(make_group(5), 7, 1)
        assert exc_info.value.available == 0

    def test_groupe_sans_renfort(self):
        with pytest.raises(QuotaExceededError):
            allocate(make_group(0), 0, 1)

    def test_triplet_invalide_verifie_avant_le_quota(self):
        with pytest.raises(ValidationError):
            allocate(make_group(5), 0, 1, Headcount(20, 22, -2))

    def test_monotonie_du_cumul(self):
        """Une suite d'allocations ne dépasse jamais le plafond."""
        group = make_group(5)
        total = 0
        for delta in [1, 2, 3, 1, 1, 4]:
            try:
                total = allocate(group, total, delta)
            except QuotaExceededError:
                pass
            assert total <= group.max_reinforcements
        assert total == 5


# ============================================================
# Triplet d'effectifs
# ============================================================

class TestHeadcount:
    def test_ne_mangeant_pas_calcule(self):
        assert complete_headcount(20, 15) == Headcount(20, 15, 5)

    def test_triplet_valide(self):
        validate_headcount(Headcount(20, 15, 5))

    def test_mangeant_superieur_aux_presents(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_headcount(complete_headcount(20, 22))
        assert exc_info.value.details["constraint"] == "non_negative"

    def test_mangeant_superieur_aux_presents_avec_triplet_explicite(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_headcount(Headcount(20, 22, 0))
        assert exc_info.value.details["constraint"] == "eating_le_present"

    def test_somme_incoherente(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_headcount(Headcount(20, 15, 3))
        assert exc_info.value.details["constraint"] == "sum_equals_present"

    def test_valeurs_negatives(self):
        with pytest.raises(ValidationError, match="négatifs"):
            validate_headcount(Headcount(-1, 0, -1))


# ============================================================
# submit_attendance
# ============================================================

class TestSubmitAttendance:
    def test_premiere_soumission_cree_l_enregistrement(self, store):
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)

        result = submit_attendance(
            store, Actor(id=teacher.id), group.id,
            AttendanceSubmit(students_present=20, students_eating=15, reinforcements_delta=2),
        )

        assert result.students_not_eating == 5
        assert result.reinforcements_used == 2
        assert result.group_name == "3A"
        assert result.registrant_name == teacher.name
        assert len(store.attendance) == 1
        assert store.commits == 1

    def test_soumissions_suivantes_cumulent_les_renforts(self, store):
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        actor = Actor(id=teacher.id)

        submit_attendance(store, actor, group.id,
                          AttendanceSubmit(students_present=20, students_eating=15, reinforcements_delta=3))
        result = submit_attendance(store, actor, group.id,
                                   AttendanceSubmit(students_present=21, students_eating=18, reinforcements_delta=2))

        assert len(store.attendance) == 1  # mise à jour, pas de doublon
        assert result.reinforcements_used == 5
        assert result.students_present == 21
        assert result.students_not_eating == 3

    def test_quota_depasse_ne_modifie_rien(self, store):
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        record = store.add_attendance(teacher, group, reinforcements_used=5)

        with pytest.raises(QuotaExceededError) as exc_info:
            submit_attendance(store, Actor(id=teacher.id), group.id,
                              AttendanceSubmit(students_present=20, students_eating=15, reinforcements_delta=1))

        assert exc_info.value.available == 0
        assert record.reinforcements_used == 5
        assert store.commits == 0

    def test_triplet_invalide_aucun_enregistrement(self, store):
        teacher = store.add_registrant()
        group = store.add_group()

        with pytest.raises(ValidationError):
            submit_attendance(store, Actor(id=teacher.id), group.id,
                              AttendanceSubmit(students_present=20, students_eating=22))

        assert store.attendance == {}

    def test_groupe_inexistant(self, store):
        teacher = store.add_registrant()
        with pytest.raises(NotFoundError):
            submit_attendance(store, Actor(id=teacher.id), uuid.uuid4(),
                              AttendanceSubmit(students_present=1, students_eating=1))

    def test_meme_cle_de_soumission_ne_recompte_pas(self, store):
        """Un renvoi de la même soumission (retry réseau) ne double pas les renforts."""
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        actor = Actor(id=teacher.id)
        payload = AttendanceSubmit(students_present=20, students_eating=15,
                                   reinforcements_delta=2, submission_key="sub-001")

        submit_attendance(store, actor, group.id, payload)
        result = submit_attendance(store, actor, group.id, payload)

        assert result.reinforcements_used == 2
        assert store.commits == 1

    def test_cles_differentes_cumulent(self, store):
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        actor = Actor(id=teacher.id)

        submit_attendance(store, actor, group.id, AttendanceSubmit(
            students_present=20, students_eating=15, reinforcements_delta=2, submission_key="a"))
        result = submit_attendance(store, actor, group.id, AttendanceSubmit(
            students_present=20, students_eating=15, reinforcements_delta=2, submission_key="b"))

        assert result.reinforcements_used == 4

    def test_renvoi_d_une_cle_anterieure_ne_recompte_pas(self, store):
        """A puis B puis renvoi de A : seul le cumul A + B est retenu."""
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        actor = Actor(id=teacher.id)
        first = AttendanceSubmit(students_present=20, students_eating=15, reinforcements_delta=2, submission_key="a")
        second = AttendanceSubmit(students_present=20, students_eating=15, reinforcements_delta=1, submission_key="b")

        submit_attendance(store, actor, group.id, first)
        submit_attendance(store, actor, group.id, second)
        result = submit_attendance(store, actor, group.id, first)

        assert result.reinforcements_used == 3
        assert store.commits == 2

    def test_seules_les_cles_recentes_sont_conservees(self, store):
        teacher = store.add_registrant()
        group = store.add_group(max_reinforcements=5)
        actor = Actor(id=teacher.id)

        for i in range(RECENT_SUBMISSION_KEYS + 1):
            submit_attendance(store, actor, group.id, AttendanceSubmit(
                students_present=20, students_eating=15, submission_key=f"k-{i}"))

        record = next(iter(store.attendance.values()))
        assert len(record.recent_submission_keys) == RECENT_SUBMISSION_KEYS
        assert "k-0" not in record.recent_submission_keys
        assert record.recent_submission_keys[-1] == f"k-{RECENT_SUBMISSION_KEYS}"

    def test_enseignants_distincts_enregistrements_distincts(self, store):
        first = store.add_registrant()
        second = store.add_registrant(name="Luis Gómez", code="T-002")
        group = store.add_group(max_reinforcements=5)

        submit_attendance(store, Actor(id=first.id), group.id,
                          AttendanceSubmit(students_present=10, students_eating=10, reinforcements_delta=5))
        result = submit_attendance(store, Actor(id=second.id), group.id,
                                   AttendanceSubmit(students_present=12, students_eating=11, reinforcements_delta=5))

        assert result.reinforcements_used == 5
        assert len(store.attendance) == 2


# ============================================================
# get_attendance
# ============================================================

def test_consultation_sans_enregistrement(store):
    teacher = store.add_registrant()
    group = store.add_group(max_reinforcements=4)

    lookup = get_attendance(store, teacher.id, group.id)

    assert lookup.record is None
    assert lookup.reinforcements_used == 0
    assert lookup.available == 4


def test_consultation_avec_enregistrement(store):
    teacher = store.add_registrant()
    group = store.add_group(max_reinforcements=5)
    store.add_attendance(teacher, group, reinforcements_used=3)

    lookup = get_attendance(store, teacher.id, group.id)

    assert lookup.record is not None
    assert lookup.record.reinforcements_used == 3
    assert lookup.available == 2
