"""
Tests for the generation filter engine
"""
import pytest
from datetime import date, datetime

from exceptions import ValidationException
from services.filter_engine import FilterEngine, render_as_handles


@pytest.fixture
def people(fake_person):
    return [
        fake_person(1, 'Alice', 'Martin', ['vip', 'paris'], solicitation_count=2,
                    last_solicitation_date=datetime(2026, 3, 1, 9, 30)),
        fake_person(2, 'Bob', 'Durand', ['paris'], solicitation_count=5,
                    last_solicitation_date=datetime(2026, 9, 15, 14, 0)),
        fake_person(3, 'Carol', 'Smith', ['london']),
    ]


class TestTagStates:
    """Tests for the neutral -> include -> exclude cycle"""

    def test_cycle(self):
        engine = FilterEngine()

        assert engine.get_tag_state('vip') == 'neutral'
        assert engine.set_tag_state('vip') == 'include'
        assert engine.set_tag_state('vip') == 'exclude'
        assert engine.set_tag_state('vip') == 'neutral'
        assert engine.tag_states == {}

    def test_explicit_state(self):
        engine = FilterEngine()
        assert engine.set_tag_state('vip', 'exclude') == 'exclude'
        assert engine.excluded_tags == ['vip']

    def test_unknown_state_rejected(self):
        with pytest.raises(ValidationException):
            FilterEngine().set_tag_state('vip', 'maybe')


class TestComputeResult:
    """Tests for compute_result"""

    def test_nothing_included_gives_empty_result(self, people):
        engine = FilterEngine()
        assert engine.compute_result(people) == []

        engine.set_tag_state('london', 'exclude')
        assert engine.compute_result(people) == []

    def test_include_any_tag(self, people):
        engine = FilterEngine({'vip': 'include', 'london': 'include'})
        assert [p.firstname for p in engine.compute_result(people)] == ['Alice', 'Carol']

    def test_excluded_tag_wins(self, people):
        engine = FilterEngine({'paris': 'include', 'vip': 'exclude'})
        assert [p.firstname for p in engine.compute_result(people)] == ['Bob']

    def test_max_solicitations(self, people):
        engine = FilterEngine({'paris': 'include'}, max_solicitations=3)
        assert [p.firstname for p in engine.compute_result(people)] == ['Alice']

    def test_max_solicitations_zero_keeps_never_solicited(self, people):
        engine = FilterEngine({'paris': 'include', 'london': 'include'}, max_solicitations=0)
        assert [p.firstname for p in engine.compute_result(people)] == ['Carol']

    def test_solicited_before(self, people):
        engine = FilterEngine({'paris': 'include', 'london': 'include'}, solicited_before='2026-06-30')
        assert [p.firstname for p in engine.compute_result(people)] == ['Alice', 'Carol']

    def test_solicited_before_same_day_is_kept(self, people):
        engine = FilterEngine({'paris': 'include'}, solicited_before=date(2026, 9, 15))
        assert [p.firstname for p in engine.compute_result(people)] == ['Alice', 'Bob']

    def test_result_keeps_input_order(self, people):
        engine = FilterEngine({'paris': 'include', 'london': 'include'})
        reversed_people = list(reversed(people))
        assert [p.id for p in engine.compute_result(reversed_people)] == [3, 2, 1]

    def test_input_not_mutated(self, people):
        before = list(people)
        FilterEngine({'paris': 'include'}).compute_result(people)
        assert people == before


class TestFilterValues:
    """Tests for the solicitation filters"""

    @pytest.mark.parametrize('value', [-1, 'many', True, 1.5j, 2.7, '2.7'])
    def test_bad_max_solicitations(self, value):
        with pytest.raises(ValidationException):
            FilterEngine().set_max_solicitations(value)

    def test_whole_float_max_solicitations(self):
        engine = FilterEngine()
        engine.set_max_solicitations(3.0)
        assert engine.max_solicitations == 3

    def test_clear_max_solicitations(self):
        engine = FilterEngine(max_solicitations=2)
        engine.set_max_solicitations(None)
        assert engine.max_solicitations is None

    def test_bad_date(self):
        with pytest.raises(ValidationException):
            FilterEngine().set_solicited_before('not a date')

    def test_datetime_is_reduced_to_date(self):
        engine = FilterEngine(solicited_before=datetime(2026, 1, 2, 23, 59))
        assert engine.solicited_before == date(2026, 1, 2)

    def test_reset(self):
        engine = FilterEngine({'vip': 'include'}, max_solicitations=1, solicited_before='2026-01-01')
        engine.reset()
        assert engine.to_dict() == {'tag_states': {}, 'max_solicitations': None, 'solicited_before': None}

    def test_dict_round_trip(self):
        engine = FilterEngine({'vip': 'include', 'cto': 'exclude'}, max_solicitations=4, solicited_before='2026-05-01')
        restored = FilterEngine.from_dict(engine.to_dict())

        assert restored.included_tags == ['vip']
        assert restored.excluded_tags == ['cto']
        assert restored.max_solicitations == 4
        assert restored.solicited_before == date(2026, 5, 1)


class TestRenderAsHandles:
    """Tests for the handle text"""

    def test_handles(self, fake_person):
        people = [fake_person(1, 'Ada', 'Lovelace'), fake_person(2, 'Grace', 'Hopper')]
        assert render_as_handles(people) == '@Ada Lovelace @Grace Hopper'

    def test_no_people(self):
        assert render_as_handles([]) == ''

    def test_engine_delegates(self, fake_person):
        assert FilterEngine().render_as_handles([fake_person(1, 'Ada', 'Lovelace')]) == '@Ada Lovelace'
