import itertools

import pytest

from pawtrail.errors import ValidationError
from pawtrail.models.request import PetConstraint
from pawtrail.services.route.constraint_resolver import ConstraintResolver

from fakes import pet


def _pets(*payloads):
    return [PetConstraint.model_validate(p) for p in payloads]


def test_merge_rejects_empty_pet_list():
    with pytest.raises(ValidationError):
        ConstraintResolver().merge([])


def test_single_pet_merges_to_itself():
    (only,) = _pets(pet(energy="high", ageYears=3))
    merged = ConstraintResolver().merge([only])
    assert merged == only
    assert merged is not only


def test_merge_takes_most_restrictive_values():
    pets = _pets(
        pet(id="a", weightKg=8, energy="high", ageYears=2, mobility="excellent"),
        pet(
            id="b",
            weightKg=31,
            energy="medium",
            ageYears=12,
            heatSensitive=True,
            reactive={"dogs": True},
            mobility="limited",
        ),
        pet(id="c", weightKg=15, energy="high", ageYears=6, reactive={"kids": True}),
    )

    merged = ConstraintResolver().merge(pets)

    assert merged.id == "combined"
    assert merged.weight_kg == 31
    assert merged.age_years == 12
    assert merged.energy == "medium"
    assert merged.mobility == "limited"
    assert merged.heat_sensitive is True
    assert merged.reactive.dogs is True
    assert merged.reactive.kids is True
    assert merged.reactive.bikes is False


def test_any_low_energy_pet_forces_low():
    pets = _pets(pet(energy="high"), pet(energy="low"), pet(energy="medium"))
    assert ConstraintResolver().merge(pets).energy == "low"


def test_all_high_energy_stays_high():
    pets = _pets(pet(energy="high"), pet(energy="high"))
    assert ConstraintResolver().merge(pets).energy == "high"


def test_merge_is_invariant_under_permutation():
    pets = _pets(
        pet(id="a", weightKg=5, energy="high", ageYears=1, mobility="excellent"),
        pet(id="b", weightKg=40, energy="low", ageYears=11, heatSensitive=True),
        pet(id="c", weightKg=22, energy="medium", reactive={"bikes": True}, mobility="good"),
    )
    resolver = ConstraintResolver()
    expected = resolver.merge(pets)

    for ordering in itertools.permutations(pets):
        assert resolver.merge(list(ordering)) == expected
