import pytest

from gozilla.exceptions import NameValidationError
from gozilla.wiring.names import ModuleNames, title_case, validate_module_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("orders", "orders"),
        ("  Orders ", "orders"),
        ("user_profiles", "user_profiles"),
        ("v2api", "v2api"),
    ],
)
def test_valid_module_names(raw, expected):
    assert validate_module_name(raw) == expected


@pytest.mark.parametrize(
    "raw, message",
    [
        ("", "cannot be empty"),
        ("   ", "cannot be empty"),
        ("user profiles", "cannot contain spaces"),
        ("2fa", "must start with a letter"),
        ("user-profiles", "must start with a letter"),
        ("../etc", "must start with a letter"),
        ("orders_", "single '_'"),
        ("a__b", "single '_'"),
        ("v_2", "single '_'"),
        ("func", "Go keyword"),
        ("Type", "Go keyword"),
    ],
)
def test_invalid_module_names(raw, message):
    with pytest.raises(NameValidationError, match=message):
        validate_module_name(raw)


def test_name_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_module_name("-")


@pytest.mark.parametrize(
    "module, expected",
    [("orders", "Orders"), ("user_profiles", "UserProfiles"), ("a__b_", "AB"), ("v2_api", "V2Api")],
)
def test_title_case(module, expected):
    assert title_case(module) == expected


def test_derived_names():
    names = ModuleNames.derive("orders", "example.com/shop")
    assert names.import_path == "example.com/shop/internal/modules/orders"
    assert names.type_name == names.field == "OrdersModule"
    assert names.constructor == "NewOrdersModule"
    assert names.field_type().render() == "*orders.OrdersModule"
    assert names.constructor_call("db").render() == "orders.NewOrdersModule(db)"
    assert names.registration_call("c", "RegisterRoutes", "api").render() == "c.OrdersModule.RegisterRoutes(api)"


def test_derived_import_path_with_custom_modules_dir():
    names = ModuleNames.derive("billing", "github.com/acme/api/", "/pkg/features/")
    assert names.import_path == "github.com/acme/api/pkg/features/billing"


def test_derive_validates():
    with pytest.raises(NameValidationError):
        ModuleNames.derive("bad name", "app")


@pytest.mark.parametrize("first, second", [("orders", "orders_"), ("a_b", "a__b"), ("a_b1", "a_b_1")])
def test_distinct_names_never_share_a_field(first, second):
    """Only the first spelling is accepted, so two modules cannot claim one field."""
    assert ModuleNames.derive(first, "app").field
    with pytest.raises(NameValidationError):
        ModuleNames.derive(second, "app")


def test_expressions_follow_the_import_qualifier():
    names = ModuleNames.derive("orders", "example.com/shop")
    assert names.field_type("ord").render() == "*ord.OrdersModule"
    assert names.constructor_call("db", "ord").render() == "ord.NewOrdersModule(db)"
    assert names.field_type("").render() == "*OrdersModule"
    assert names.constructor_call("db", "").render() == "NewOrdersModule(db)"
