#!/usr/bin/env python3
"""
Tests for parameter resolution against the config store and external inputs
"""

import pytest

from deployer.actions import GrantRole
from deployer.conftest import ADDR_A, ADDR_B, DEPLOYER
from deployer.errors import IssueKind, ValidationError
from deployer.models import ConstructorParam as P
from deployer.models import DeploymentUnit, ParamType, Pending
from deployer.resolver import ParameterResolver


class TestResolve:
    """Single parameter list resolution"""

    def setup_method(self):
        self.resolver = ParameterResolver()
        self.store = {"A_ADDRESS": ADDR_A, "DELAY": "86400"}
        self.external = {"DAO_ADDRESS": ADDR_B}

    def test_every_source(self):
        """Store, external, literal and deployer params resolve in declaration order"""
        params = [
            P.store("a", "A_ADDRESS"),
            P.external("dao", "DAO_ADDRESS"),
            P.literal("jurisdiction", "Global"),
            P.store("delay", "DELAY", type=ParamType.INTEGER),
            P.deployer("admin"),
        ]
        resolved = self.resolver.resolve(params, self.store, self.external, deployer=DEPLOYER)

        assert list(resolved.values) == ["a", "dao", "jurisdiction", "delay", "admin"]
        assert resolved.args == [ADDR_A, ADDR_B, "Global", 86400, DEPLOYER]

    def test_all_problems_are_reported(self):
        """Missing and malformed params are aggregated, not just the first"""
        store = {"BAD_ADDRESS": "0x1234"}
        params = [
            P.store("missing", "NOT_THERE"),
            P.store("bad", "BAD_ADDRESS"),
            P.external("dao", "DAO_ADDRESS"),
        ]
        with pytest.raises(ValidationError) as exc:
            self.resolver.resolve(params, store, {}, unit="B")

        error = exc.value
        assert error.unit == "B"
        assert error.keys == ["NOT_THERE", "BAD_ADDRESS", "DAO_ADDRESS"]
        assert [issue.key for issue in error.missing] == ["NOT_THERE", "DAO_ADDRESS"]
        assert [issue.key for issue in error.malformed] == ["BAD_ADDRESS"]
        assert "NOT_THERE" in str(error)

    def test_declaration_order_does_not_change_the_result(self):
        """Same store and inputs give the same values and issues in any order"""
        params = [
            P.store("a", "A_ADDRESS"),
            P.store("missing", "NOT_THERE"),
            P.external("dao", "DAO_ADDRESS"),
            P.external("bad", "BAD_INPUT"),
        ]
        external = dict(self.external, BAD_INPUT="0xnothex")

        def issues(ordering):
            with pytest.raises(ValidationError) as exc:
                self.resolver.resolve(ordering, self.store, external)
            return {(issue.key, issue.kind) for issue in exc.value.issues}

        assert issues(params) == issues(list(reversed(params)))
        assert issues(params) == {("NOT_THERE", IssueKind.MISSING), ("BAD_INPUT", IssueKind.MALFORMED)}

        valid = [params[0], params[2]]
        forward = self.resolver.resolve(valid, self.store, external)
        backward = self.resolver.resolve(list(reversed(valid)), self.store, external)
        assert dict(forward.values) == dict(backward.values)

    def test_blank_value_is_missing(self):
        """An empty store entry counts as not recorded"""
        with pytest.raises(ValidationError) as exc:
            self.resolver.resolve([P.store("a", "A_ADDRESS")], {"A_ADDRESS": "  "}, {})
        assert exc.value.issues[0].kind is IssueKind.MISSING

    def test_deployer_without_address_is_missing(self):
        with pytest.raises(ValidationError) as exc:
            self.resolver.resolve([P.deployer("admin")], {}, {})
        assert exc.value.issues[0].kind is IssueKind.MISSING

    def test_pending_store_key(self):
        """Keys a planned earlier unit will produce resolve to a placeholder"""
        resolved = self.resolver.resolve([P.store("c", "C_ADDRESS")], {}, {}, pending=["C_ADDRESS"])
        assert resolved["c"] == Pending("C_ADDRESS")
        assert resolved.pending == ["c"]

    def test_self_param(self):
        """The unit's own address is only known after deployment"""
        params = [P.deployed("swap")]
        assert self.resolver.resolve(params, {}, {})["swap"] == Pending("swap")
        assert self.resolver.resolve(params, {}, {}, deployed=ADDR_A)["swap"] == ADDR_A

    def test_list_params(self):
        """Lists come from comma-separated values; a deployer list holds one address"""
        store = {"SIGNERS": f"{ADDR_A},{ADDR_B}"}
        params = [P.store("signers", "SIGNERS", many=True), P.deployer("proposers", many=True)]
        resolved = self.resolver.resolve(params, store, {}, deployer=DEPLOYER)

        assert resolved["signers"] == [ADDR_A, ADDR_B]
        assert resolved["proposers"] == [DEPLOYER]

    def test_grouped_params_fold_into_struct(self):
        """Consecutive params of one group are passed as a single struct argument"""
        params = [
            P.store("tai", "A_ADDRESS", group="vaultParams"),
            P.external("dao", "DAO_ADDRESS", group="vaultParams"),
            P.literal("currency", "USD"),
        ]
        resolved = self.resolver.resolve(params, self.store, self.external)
        assert resolved.args == [{"tai": ADDR_A, "dao": ADDR_B}, "USD"]


class TestResolveUnit:
    """Constructor and post-deploy action params together"""

    def setup_method(self):
        self.resolver = ParameterResolver()

    def test_action_issues_are_included(self):
        """A broken action param fails the unit before anything is sent"""
        unit = DeploymentUnit(
            name="Swap",
            contract="Swap",
            output_key="SWAP_ADDRESS",
            params=[P.store("a", "A_ADDRESS")],
            actions=[GrantRole("MINTER_ROLE", grantee=P.deployed("swap"), target=P.store("coin", "COIN_ADDRESS"))],
        )
        with pytest.raises(ValidationError) as exc:
            self.resolver.resolve_unit(unit, {"A_ADDRESS": ADDR_A}, {})

        issue = exc.value.issues[0]
        assert len(exc.value.issues) == 1
        assert issue.key == "COIN_ADDRESS"
        assert issue.name == "actions[0].grantRole(MINTER_ROLE).coin"

    def test_self_is_pending_until_deployed(self):
        unit = DeploymentUnit(
            name="Swap",
            contract="Swap",
            output_key="SWAP_ADDRESS",
            actions=[GrantRole("MINTER_ROLE", grantee=P.deployed("swap"), target=P.store("coin", "COIN_ADDRESS"))],
        )
        store = {"COIN_ADDRESS": ADDR_B}
        resolved = self.resolver.resolve_unit(unit, store, {})
        assert resolved.actions[0]["swap"] == Pending("swap")

        bindings = self.resolver.resolve_actions(unit, store, {}, deployed=ADDR_A)
        assert bindings[0]["swap"] == ADDR_A
        assert bindings[0]["coin"] == ADDR_B


if __name__ == "__main__":
    pytest.main([__file__])
