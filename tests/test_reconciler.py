import pytest
from sqlalchemy import update

from storefront.data.models import CartLineModel
from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.services.reconciler import CartReconciler


@pytest.fixture
def reconciler(db_session):
    return CartReconciler(db_session)


def lines_of(db_session, user_id):
    return CartRepo(db_session).find_cart_lines(user_id)


def test_resolve_master_product_sums_localizations(reconciler, make_product):
    base = make_product(stock=2)
    ar = make_product(stock=3, locale="ar", localization_of=base)
    fr = make_product(stock=4, locale="fr", localization_of=base)

    master = reconciler.resolve_master_product(ar.id)

    assert sorted(master.all_variant_ids) == sorted([base.id, ar.id, fr.id])
    assert master.total_stock == 9
    assert master.is_combined is True


def test_resolve_master_product_unknown_id(reconciler):
    with pytest.raises(NotFoundError):
        reconciler.resolve_master_product(999)


def test_resolve_master_product_is_idempotent(reconciler, make_product):
    base = make_product(stock=2)
    make_product(stock=3, locale="ar", localization_of=base)

    first = reconciler.resolve_master_product(base.id)
    second = reconciler.resolve_master_product(base.id)

    assert first == second


def test_combined_cart_quantity_counts_every_variant(reconciler, db_session, user, make_product):
    base = make_product(stock=10)
    ar = make_product(stock=10, locale="ar", localization_of=base)
    other = make_product(stock=10, name="Other")

    reconciler.apply_quantity_delta(user.id, base.id, 2)
    reconciler.apply_quantity_delta(user.id, ar.id, 3)
    reconciler.apply_quantity_delta(user.id, other.id, 4)
    db_session.commit()

    combined = reconciler.get_combined_cart_quantity(user.id, base.id)

    assert combined.total_quantity_in_cart == 5
    assert {l.product_id for l in combined.cart_lines} == {base.id, ar.id}


def test_single_product_add_then_exceed(reconciler, db_session, user, make_product):
    a = make_product(stock=5)

    line = reconciler.apply_quantity_delta(user.id, a.id, 3)
    db_session.commit()
    assert line.quantity == 3

    with pytest.raises(ValidationError) as exc:
        reconciler.apply_quantity_delta(user.id, a.id, 3)

    assert exc.value.code == "insufficient_stock"
    assert exc.value.context["available"] == 5
    assert lines_of(db_session, user.id)[0].quantity == 3


def test_add_up_to_exact_stock(reconciler, db_session, user, make_product):
    a = make_product(stock=5)

    reconciler.apply_quantity_delta(user.id, a.id, 3)
    line = reconciler.apply_quantity_delta(user.id, a.id, 2)
    db_session.commit()

    assert line.quantity == 5


def test_localized_variants_share_stock(reconciler, db_session, user, make_product):
    b = make_product(stock=2)
    b_ar = make_product(stock=3, locale="ar", localization_of=b)

    line = reconciler.apply_quantity_delta(user.id, b.id, 4)
    db_session.commit()
    assert line.quantity == 4

    with pytest.raises(ValidationError) as exc:
        reconciler.apply_quantity_delta(user.id, b_ar.id, 2)

    # headroom dla tej wersji = 5 - (4 - 0)
    assert exc.value.context["available"] == 1
    assert CartRepo(db_session).get_cart_line(user.id, b_ar.id) is None


def test_inactive_product_rejects_any_positive_delta(reconciler, db_session, user, make_product):
    c = make_product(stock=10, is_active=False)

    with pytest.raises(ValidationError) as exc:
        reconciler.apply_quantity_delta(user.id, c.id, 1)

    assert exc.value.code == "product_unavailable"
    assert lines_of(db_session, user.id) == []


def test_out_of_stock_copy_can_use_sibling_stock(reconciler, db_session, user, make_product):
    base = make_product(stock=0, in_stock=False)
    make_product(stock=3, locale="ar", localization_of=base)

    line = reconciler.apply_quantity_delta(user.id, base.id, 2)
    db_session.commit()

    assert line.product_id == base.id
    assert line.quantity == 2


def test_zero_delta_is_rejected(reconciler, user, make_product):
    a = make_product(stock=5)

    with pytest.raises(ValidationError):
        reconciler.apply_quantity_delta(user.id, a.id, 0)


def test_unknown_product(reconciler, user):
    with pytest.raises(NotFoundError):
        reconciler.apply_quantity_delta(user.id, 12345, 1)


def test_decrement_to_zero_deletes_line(reconciler, db_session, user, make_product):
    a = make_product(stock=5)
    reconciler.apply_quantity_delta(user.id, a.id, 2)
    db_session.commit()

    assert reconciler.apply_quantity_delta(user.id, a.id, -2) is None
    db_session.commit()

    assert lines_of(db_session, user.id) == []


def test_decrement_partially(reconciler, db_session, user, make_product):
    a = make_product(stock=5)
    reconciler.apply_quantity_delta(user.id, a.id, 4)
    db_session.commit()

    line = reconciler.apply_quantity_delta(user.id, a.id, -1)
    db_session.commit()

    assert line.quantity == 3
    assert line.version == 2


def test_decrement_below_zero_is_rejected(reconciler, db_session, user, make_product):
    a = make_product(stock=5)
    reconciler.apply_quantity_delta(user.id, a.id, 1)
    db_session.commit()

    with pytest.raises(ValidationError):
        reconciler.apply_quantity_delta(user.id, a.id, -2)

    assert lines_of(db_session, user.id)[0].quantity == 1


def test_decrement_missing_line(reconciler, user, make_product):
    a = make_product(stock=5)

    with pytest.raises(NotFoundError):
        reconciler.apply_quantity_delta(user.id, a.id, -1)


def test_decrement_allowed_on_inactive_product(reconciler, db_session, user, make_product):
    a = make_product(stock=5)
    reconciler.apply_quantity_delta(user.id, a.id, 3)
    db_session.commit()

    a.is_active = False
    db_session.commit()

    line = reconciler.apply_quantity_delta(user.id, a.id, -1)
    assert line.quantity == 2


def test_stale_version_is_a_conflict(db_session, user, make_product):
    a = make_product(stock=5)
    repo = CartRepo(db_session)
    line = repo.create_cart_line(user.id, a.id, 1)
    db_session.commit()
    line = repo.get_cart_line(user.id, a.id)

    # inny request zdazyl zmienic linie
    db_session.execute(
        update(CartLineModel)
        .where(CartLineModel.id == line.id)
        .values(version=CartLineModel.version + 1)
        .execution_options(synchronize_session=False)
    )

    assert repo.update_cart_line(line, 2) == 0


def test_reconciler_reports_version_conflict(reconciler, db_session, user, make_product, monkeypatch):
    a = make_product(stock=5)
    reconciler.apply_quantity_delta(user.id, a.id, 1)
    db_session.commit()

    monkeypatch.setattr(reconciler.carts, "update_cart_line", lambda line, quantity: 0)

    with pytest.raises(ConflictError):
        reconciler.apply_quantity_delta(user.id, a.id, 1)


def test_duplicate_line_insert_is_a_conflict(db_session, user, make_product):
    a = make_product(stock=5)
    repo = CartRepo(db_session)
    repo.create_cart_line(user.id, a.id, 1)
    db_session.commit()

    # drugi request wstawil te sama linie po naszym sprawdzeniu
    with pytest.raises(ConflictError) as exc:
        repo.create_cart_line(user.id, a.id, 1)
    db_session.rollback()

    assert exc.value.code == "duplicate_line"
    assert len(lines_of(db_session, user.id)) == 1


def test_headroom_is_zero_when_stock_shrank_below_holdings(reconciler, db_session, user, make_product):
    b = make_product(stock=2)
    b_ar = make_product(stock=3, locale="ar", localization_of=b)
    reconciler.apply_quantity_delta(user.id, b_ar.id, 4)
    db_session.commit()

    b_ar.stock = 0
    db_session.commit()

    with pytest.raises(ValidationError) as exc:
        reconciler.apply_quantity_delta(user.id, b.id, 1)

    # 2 - (4 - 0) < 0
    assert exc.value.context["available"] == 0
    assert "at most 0" in exc.value.message
    assert CartRepo(db_session).get_cart_line(user.id, b.id) is None
