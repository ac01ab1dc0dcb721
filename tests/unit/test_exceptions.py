from scm_agent.exceptions import (
    ConfigurationError,
    SCMAgentError,
    UnknownOrderError,
    UnknownProductError,
)


def test_error_carries_code_and_details():
    err = UnknownProductError(42)
    assert isinstance(err, SCMAgentError)
    assert err.code == "UNKNOWN_PRODUCT"
    assert err.as_dict() == {"code": "UNKNOWN_PRODUCT", "product_id": 42}
    assert str(err) == "UnknownProductError(UNKNOWN_PRODUCT: product_id=42)"


def test_configuration_error_keeps_message():
    err = ConfigurationError("bad file", path="x.yaml")
    assert err.details == {"message": "bad file", "path": "x.yaml"}


def test_error_without_details():
    assert str(SCMAgentError("BOOM")) == "SCMAgentError(BOOM)"
    assert UnknownOrderError(3).as_dict()["order_id"] == 3
