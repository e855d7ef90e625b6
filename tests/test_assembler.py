import pytest

from sieveql import (
    FindOneOptions,
    FindOptions,
    InvalidPaginationError,
    InvalidSortError,
    PaginationPolicy,
    QueryArgs,
    SieveConfig,
    assemble,
    assemble_one,
)
from sieveql.assembler import infer_relations
from sieveql.core.predicates import membership, range_gt

CLAMP = SieveConfig(pagination_policy=PaginationPolicy.clamp)


def test_defaults():
    options = assemble({})
    assert options == FindOptions(skip=0, take=None, where={}, order=None, relations=[])
    assert assemble(None).as_dict() == {'skip': 0, 'take': None, 'where': {}, 'order': None, 'relations': []}


def test_full_request():
    options = assemble({
        'skip': 10,
        'take': 20,
        'order': {'last_name': 'ASC', 'customer': {'first_name': 'DESC'}},
        'filter': {'AND': [{'status': {'eq': 'ACTIVE'}}, {'total': {'gt': 50}}]},
    })
    assert options.skip == 10
    assert options.take == 20
    assert options.where == {'status': 'ACTIVE', 'total': range_gt(50)}
    assert options.order == {'last_name': 'ASC', 'customer': {'first_name': 'DESC'}}
    assert options.relations == ['customer']


def test_order_is_passed_through_unchanged():
    order = {'total': 'desc'}
    assert assemble({'order': order}).order is order


def test_relations_are_deduplicated_in_first_seen_order():
    assert infer_relations({'customer': {'a': 'ASC'}, 'total': 'DESC', 'items': {'b': 'ASC'}}) == ['customer', 'items']
    assert infer_relations(None) == []


@pytest.mark.parametrize("raw", [{'skip': -1}, {'take': 0}, {'take': -5}])
def test_reject_policy_raises(raw):
    with pytest.raises(InvalidPaginationError) as ei:
        assemble(raw)
    assert ei.value.field in raw
    assert ei.value.value == raw[ei.value.field]


@pytest.mark.parametrize("raw", [{'skip': True}, {'take': '10'}, {'skip': 1.5}])
def test_non_integer_bounds_always_raise(raw):
    with pytest.raises(InvalidPaginationError):
        assemble(raw, config=CLAMP)


def test_clamp_policy():
    options = assemble({'skip': -3, 'take': 0}, config=CLAMP)
    assert (options.skip, options.take) == (0, 1)


def test_max_take():
    with pytest.raises(InvalidPaginationError):
        assemble({'take': 101}, config=SieveConfig(max_take=100))
    assert assemble({'take': 101}, config=SieveConfig(pagination_policy='clamp', max_take=100)).take == 100
    assert assemble({'take': 100}, config=SieveConfig(max_take=100)).take == 100


def test_empty_disjunction_becomes_empty_conjunction():
    assert assemble({'filter': {'OR': []}}).where == {}
    assert assemble({'filter': []}).where == {}


def test_filter_list_is_implicit_or():
    options = assemble({'filter': [{'total': {'in': [1, 2]}}, {'status': {'eq': 'SHIPPED'}}]})
    assert options.where == [{'total': membership([1, 2])}, {'status': 'SHIPPED'}]


def test_aliases_and_query_args():
    from_aliases = assemble({'sort': {'customer': {'last_name': 'ASC'}}, 'where': {'id': {'eq': 3}}})
    assert from_aliases.where == {'id': 3}
    assert from_aliases.relations == ['customer']
    args = QueryArgs(skip=2, take=5, order={'total': 'ASC'}, filter={'note': {'isNull': False}})
    assert assemble(args).skip == 2
    assert QueryArgs.from_mapping({'skip': 1, 'order': {'a': 'ASC'}}).order == {'a': 'ASC'}


def test_sort_spec_validation(registry):
    spec = registry.sort_spec('Order')
    assert assemble({'order': {'customer': {'last_name': 'ASC'}}}, sort_spec=spec).relations == ['customer']
    with pytest.raises(InvalidSortError):
        assemble({'order': {'customer': {'nope': 'ASC'}}}, sort_spec=spec)


def test_assemble_one():
    one = assemble_one({'skip': -1, 'filter': {'id': {'eq': 1}}, 'order': {'id': 'ASC'}})
    assert one == FindOneOptions(where={'id': 1}, order={'id': 'ASC'})
    assert one.as_dict() == {'where': {'id': 1}, 'order': {'id': 'ASC'}}


def test_sort_spec_normalizes_directions_before_relation_inference(registry):
    spec = registry.sort_spec('Order')
    options = assemble({'order': {'total': 'desc', 'customer': {'last_name': 'asc'}, 'note': None}}, sort_spec=spec)
    assert options.order == {'total': 'DESC', 'customer': {'last_name': 'ASC'}}
    assert options.relations == ['customer']
    assert assemble({'order': {'total': 'desc'}}, sort_spec=spec).relations == []
    assert assemble_one({'order': {'id': 'asc'}}, sort_spec=spec).order == {'id': 'ASC'}


def test_filter_depth_comes_from_config():
    nested = {'customer': {'orders': {'id': {'eq': 1}}}}
    assert assemble({'filter': nested}).where == {'customer': {'orders': {'id': 1}}}
    shallow = SieveConfig(max_filter_depth=1)
    assert assemble({'filter': nested}, config=shallow).where == {'customer': {'orders': {'id': {'eq': 1}}}}
