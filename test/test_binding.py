"""
Tests for parameter binding.
"""

import numpy as np
import pytest
from common import K, P0, Q0, decay_v, oscillator_v

from geometric_equations import BoundRole, NullParameters, bind_parameters
from geometric_equations.binding import bind_roles, freeze_parameters


def test_bound_role_appends_parameters():
    """Test that the bound role forwards all arguments plus params."""
    seen = []

    def role(out, t, q, p, params):
        seen.append(params)
        out[0] = params["k"] * q[0]

    bound = bind_parameters(role, freeze_parameters({"k": K}))
    out = np.zeros(1)
    bound(out, 0.0, Q0, P0)
    assert out[0] == pytest.approx(0.25)
    assert dict(seen[0]) == {"k": K}


def test_bound_role_returns_value():
    bound = BoundRole(lambda t, q, params: params["k"] * q[0], {"k": 2.0})
    assert bound(0.0, Q0) == pytest.approx(1.0)


def test_null_parameters_is_identity():
    """Test that binding without parameters returns the raw callable."""
    assert bind_parameters(decay_v, NullParameters()) is decay_v
    assert bind_parameters(None, {"k": K}) is None


def test_tuples_are_bound_elementwise():
    bound = bind_parameters((oscillator_v, None), {"k": K})
    assert isinstance(bound[0], BoundRole)
    assert bound[1] is None


def test_frozen_parameters_are_read_only():
    """Test that a bound record cannot be changed through the bundle."""
    params = {"k": K}
    frozen = freeze_parameters(params)
    params["k"] = 1.0
    assert frozen["k"] == K
    with pytest.raises(TypeError):
        frozen["k"] = 2.0


def test_bound_role_equality():
    a = BoundRole(oscillator_v, {"k": K})
    b = BoundRole(oscillator_v, {"k": K})
    c = BoundRole(oscillator_v, {"k": 1.0})
    assert a == b
    assert hash(a) == hash(b)
    assert a != c


def test_bind_roles():
    """Test binding of a whole bundle."""
    roles = {"v": oscillator_v}
    bundle = bind_roles(roles, {"k": K}, parameterized=True)
    assert isinstance(bundle["v"], BoundRole)

    bundle = bind_roles({"v": decay_v}, NullParameters(), parameterized=False)
    assert bundle["v"] is decay_v
