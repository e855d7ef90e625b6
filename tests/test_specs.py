import pytest

from sieveql import FieldDescriptor, InvalidSortError, RelationKind, ScalarKind
from sieveql.core.fields import EntitySpec
from sieveql.core.operators import (
    BOOLEAN_OPERATORS,
    ID_OPERATORS,
    NUMBER_OPERATORS,
    STRING_OPERATORS,
    Op,
    OperatorChoice,
    UnknownOperator,
    operators_for_kind,
    parse_operator,
    select_operator,
)
from sieveql.core.specs import (
    FilterSpecRef,
    OperatorSchema,
    SortLeaf,
    SortSpecRef,
    build_filter_spec,
    build_sort_spec,
)


def _ops(*names):
    return frozenset(Op(n) for n in names)


def test_operator_sets_per_kind():
    assert STRING_OPERATORS == _ops('eq', 'ne', 'in', 'nin', 'like', 'ilike', 'isNull', 'raw')
    assert NUMBER_OPERATORS == _ops('eq', 'ne', 'in', 'nin', 'gt', 'gte', 'lt', 'lte', 'between', 'isNull', 'raw')
    assert operators_for_kind(ScalarKind.DATE) == NUMBER_OPERATORS
    assert BOOLEAN_OPERATORS == _ops('eq', 'ne', 'isNull', 'raw')
    assert ID_OPERATORS == _ops('eq', 'ne', 'in', 'nin', 'isNull', 'raw')


@pytest.mark.parametrize("kind", [ScalarKind.ENUM, 'geometry', 'json'])
def test_unknown_kinds_fall_back_to_string_operators(kind):
    assert operators_for_kind(kind) == STRING_OPERATORS


def test_parse_operator_tags_unknown_keys():
    assert parse_operator('isNull') is Op.IS_NULL
    assert parse_operator('regex') == UnknownOperator('regex')


def test_select_operator_first_key_wins():
    assert select_operator({'gt': 10, 'lt': 20, 'eq': 3}) == OperatorChoice(Op.GT, 10, ('lt', 'eq'))
    assert select_operator({'eq': 1}).discarded == ()
    with pytest.raises(ValueError):
        select_operator({})


def test_build_specs_project_sortable_and_filterable_fields():
    entity = EntitySpec('Customer', (
        FieldDescriptor('id', ScalarKind.ID),
        FieldDescriptor('last_name', ScalarKind.STRING, filterable=False),
        FieldDescriptor('email', ScalarKind.STRING, sortable=False),
        FieldDescriptor('orders', RelationKind('Order'), sortable=False),
    ))
    sort_spec = build_sort_spec(entity)
    filter_spec = build_filter_spec(entity)
    assert sort_spec.fields == {'id': SortLeaf(ScalarKind.ID), 'last_name': SortLeaf(ScalarKind.STRING)}
    assert set(filter_spec.fields) == {'id', 'email', 'orders'}
    assert filter_spec.operators_for('email') == OperatorSchema(ScalarKind.STRING, STRING_OPERATORS)
    assert filter_spec.fields['orders'] == FilterSpecRef('Order')
    assert filter_spec.operators_for('orders') is None
    assert filter_spec.combinators == ('AND', 'OR')


def test_operator_schema_allows():
    schema = OperatorSchema(ScalarKind.BOOLEAN, BOOLEAN_OPERATORS)
    assert schema.allows('eq')
    assert schema.allows(Op.IS_NULL)
    assert not schema.allows('gt')
    assert not schema.allows('regex')


def test_refs_compare_by_name():
    assert SortSpecRef('Customer') == SortSpecRef('Customer', spec=None)
    assert 'spec' not in repr(FilterSpecRef('Order'))


def test_sort_validation_accepts_nested_relations(registry):
    spec = registry.sort_spec('Order')
    spec.validate({'total': 'DESC', 'customer': {'last_name': 'ASC'}})
    assert spec.normalize({'total': 'desc', 'note': None, 'customer': {'first_name': 'asc'}}) == {
        'total': 'DESC',
        'customer': {'first_name': 'ASC'},
    }
    assert spec.normalize(None) is None


@pytest.mark.parametrize(
    "expression,path",
    [
        ({'nope': 'ASC'}, ('nope',)),
        ({'total': 'UP'}, ('total',)),
        ({'total': {'x': 'ASC'}}, ('total',)),
        ({'customer': 'ASC'}, ('customer',)),
        ({'customer': {'email': 'ASC'}}, ('customer', 'email')),
    ],
)
def test_sort_validation_errors(registry, expression, path):
    with pytest.raises(InvalidSortError) as ei:
        registry.sort_spec('Order').validate(expression)
    assert ei.value.path == path
    assert ei.value.entity_name in ('Order', 'Customer')


def test_sort_validation_rejects_non_relation_sort_fields(registry):
    # items is declared sortable=False
    with pytest.raises(InvalidSortError):
        registry.sort_spec('Order').validate({'items': {'quantity': 'ASC'}})
