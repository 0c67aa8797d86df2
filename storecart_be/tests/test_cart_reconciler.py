import pytest

from conftest import create_user, seed_product

from storecart.services.cart_identity import CartLine
from storecart.services.cart_reconciler import CartReconciler, merge_snapshot, reconcile
from storecart.services.cart_store import CartStore
from storecart.services.cart_validator import LineRequest
from storecart.services.diagnostics import DiagnosticKind
from storecart.services.inventory import Sized, Unsized

P1, P2, P3, P4 = 1, 2, 3, 4


@pytest.fixture
def inventory(make_inventory):
    return make_inventory(
        {P1: Unsized(3), P2: Sized({"M": 2, "L": 0}), P4: Unsized(0)},
        names={P1: "Mug", P2: "Tee", P4: "Cap"},
    )


def kinds(result):
    return [(d.kind, d.product_id) for d in result.diagnostics]


def test_deleted_product_and_capped_size(inventory) -> None:
    result = reconcile([LineRequest(P3, None, 1), LineRequest(P2, "M", 10)], inventory)

    assert result.final_lines == [CartLine(P2, "M", 2)]
    assert kinds(result) == [
        (DiagnosticKind.REMOVED_NONEXISTENT_PRODUCT, P3),
        (DiagnosticKind.QUANTITY_ADJUSTED, P2),
    ]
    removed, adjusted = result.diagnostics
    assert removed.message == "Product no longer exists"
    assert adjusted.quantity == 2
    assert adjusted.size == "M"
    assert adjusted.name == "Tee"
    assert adjusted.message == "Quantity for size M adjusted to 2 due to stock limitations"


def test_every_rejection_maps_to_a_removal(inventory) -> None:
    snapshot = [
        LineRequest(P2, "L", 1),    # sold-out size
        LineRequest(P2, "XXL", 1),  # size not in catalog
        LineRequest(P4, None, 1),   # unsized, sold out
        LineRequest(P2, None, 1),   # sized product without size
        LineRequest(P1, "M", 1),    # size on unsized product
        LineRequest(P1, None, 0),   # bad quantity
    ]
    result = reconcile(snapshot, inventory)

    assert result.final_lines == []
    assert [d.kind for d in result.diagnostics] == [
        DiagnosticKind.REMOVED_OUT_OF_STOCK,
        DiagnosticKind.REMOVED_OUT_OF_STOCK,
        DiagnosticKind.REMOVED_OUT_OF_STOCK,
        DiagnosticKind.REMOVED_INVALID_SIZE,
        DiagnosticKind.REMOVED_INVALID_SIZE,
        DiagnosticKind.REMOVED_INVALID_QUANTITY,
    ]
    assert result.diagnostics[0].message == "Size L is out of stock"


def test_exact_quantities_pass_without_diagnostics(inventory) -> None:
    result = reconcile([LineRequest(P1, None, 3), LineRequest(P2, "M", 1)], inventory)
    assert result.final_lines == [CartLine(P1, None, 3), CartLine(P2, "M", 1)]
    assert result.diagnostics == []


def test_each_entry_has_exactly_one_outcome(inventory) -> None:
    snapshot = [
        LineRequest(P1, None, 5),
        LineRequest(P2, "M", 1),
        LineRequest(P3, None, 1),
        LineRequest(P2, "L", 2),
        LineRequest(P1, "S", 1),
        LineRequest(P4, None, "x"),
    ]
    result = reconcile(snapshot, inventory)

    included = {line.key for line in result.final_lines}
    omitted = [
        d for d in result.diagnostics if d.kind is not DiagnosticKind.QUANTITY_ADJUSTED
    ]
    assert len(result.final_lines) + len(omitted) == len(snapshot)
    for entry in snapshot:
        accounted = entry.key in included or any(
            d.product_id == entry.product_id and d.size == entry.size for d in omitted
        )
        assert accounted, entry


def test_stale_client_ids_are_reported_not_fatal(inventory) -> None:
    result = reconcile([LineRequest("64f0c2deadbeef", None, 1), LineRequest(P1, None, 1)], inventory)

    assert result.final_lines == [CartLine(P1, None, 1)]
    [removed] = result.diagnostics
    assert removed.kind is DiagnosticKind.REMOVED_NONEXISTENT_PRODUCT
    assert removed.product_id == "64f0c2deadbeef"
    assert removed.name is None


def test_processing_order_does_not_change_outcomes(inventory) -> None:
    snapshot = [LineRequest(P3, None, 1), LineRequest(P2, "M", 10), LineRequest(P1, None, 1)]
    forward = reconcile(snapshot, inventory)
    backward = reconcile(list(reversed(snapshot)), inventory)

    assert sorted(line.key.sort_key for line in forward.final_lines) == sorted(
        line.key.sort_key for line in backward.final_lines
    )
    assert sorted(kinds(forward)) == sorted(kinds(backward))


def test_merge_snapshot_sums_duplicate_identities() -> None:
    merged = merge_snapshot([
        LineRequest(P2, "M", 1),
        LineRequest(P1, None, "2"),
        LineRequest(P2, "M", 3),
        LineRequest(P2, "L", 1),
        LineRequest(P1, "", 1),
        LineRequest(P1, None, -1),
    ])
    assert merged == [
        LineRequest(P2, "M", 4),
        LineRequest(P1, None, 3),
        LineRequest(P2, "L", 1),
        LineRequest(P1, None, -1),
    ]


def test_sync_overwrites_the_stored_cart(session_factory, db) -> None:
    user_id = create_user(session_factory)
    mug = seed_product(session_factory, title="Mug", stock=10)
    tee = seed_product(session_factory, title="Tee", sizes=[("M", 2)])
    store = CartStore(db, user_id)
    store.add(mug, None, 4)

    result = CartReconciler(store).sync([
        LineRequest(tee, "M", 1),
        LineRequest(tee, "M", 9),
        LineRequest(9999, None, 1),
    ])

    assert [(i.id, i.size, i.quantity) for i in result.items] == [(tee, "M", 2)]
    assert [d.kind for d in result.diagnostics] == [
        DiagnosticKind.QUANTITY_ADJUSTED,
        DiagnosticKind.REMOVED_NONEXISTENT_PRODUCT,
    ]
    # The mug line held on the server is gone: sync replaces rather than merges
    stored = CartStore(db, user_id).get().items
    assert [(i.id, i.size, i.quantity) for i in stored] == [(tee, "M", 2)]


def test_sync_with_empty_snapshot_empties_the_cart(session_factory, db) -> None:
    user_id = create_user(session_factory)
    mug = seed_product(session_factory, title="Mug", stock=10)
    store = CartStore(db, user_id)
    store.add(mug, None, 1)

    result = CartReconciler(store).sync([])

    assert result.items == []
    assert result.diagnostics == []
