#!/usr/bin/env python3
"""
Tests for the access control rule, text-only and IR-assisted.
"""

import pytest

from conftest import SAMPLE_SOLIDITY, SAMPLE_STYLUS_COUNTER
from sentinel.access_control_detector import AccessControlRule
from sentinel.contract_ir import Dialect, FunctionDef, ParsedContract, Visibility
from sentinel.source_parser import build_contract
from sentinel.vulnerabilities import Severity


def _names(findings):
    return [f.name for f in findings]


class TestMissingAccessControl:
    """Exposed functions without an owner check"""

    @pytest.fixture
    def rule(self):
        return AccessControlRule()

    def test_pub_fn_without_markers(self, rule):
        findings = rule.check("pub fn mint(&mut self, amount: U256) { self.supply += amount; }")
        missing = [f for f in findings if f.name == "Missing Access Control"]
        assert len(missing) == 1
        assert missing[0].severity == Severity.HIGH
        assert missing[0].recommendation == "Implement role-based access control using Stylus SDK"

    def test_owner_check_removes_finding(self, rule):
        code = "pub fn mint(&mut self) { require!(msg.sender == self.admin); }"
        assert "Missing Access Control" not in _names(rule.check(code))

    @pytest.mark.parametrize("marker", [
        "ensure!(is_owner(caller))",
        "self.only_owner()?;",
        "modifier onlyOwner",
        "require(msg.sender == owner)",
        "if (msg.sender == owner) {}",
    ])
    def test_each_marker_counts(self, rule, marker):
        code = f"pub fn mint(&mut self) {{ {marker} }}"
        assert "Missing Access Control" not in _names(rule.check(code))

    def test_access_control_attribute_suppresses(self, rule):
        code = "#[access_control(role = MINTER)]\npub fn mint(&mut self) {}"
        assert "Missing Access Control" not in _names(rule.check(code))

    def test_solidity_external_function_text_fallback(self, rule):
        code = "function withdraw(uint256 amount) external { payable(to).transfer(amount); }"
        assert "Missing Access Control" in _names(rule.check(code))

    def test_solidity_owner_check(self, rule):
        code = "function withdraw(uint256 amount) external { require(msg.sender == owner); }"
        assert "Missing Access Control" not in _names(rule.check(code))

    def test_no_exposed_functions(self, rule):
        assert "Missing Access Control" not in _names(rule.check("fn helper() {}"))


class TestIRAssisted:
    """With an IR, exposure comes from function visibility."""

    def test_ir_without_public_functions(self):
        contract = ParsedContract(
            dialect=Dialect.SOLIDITY,
            functions=(FunctionDef(name="_inner", visibility=Visibility.INTERNAL),),
        )
        # text mentions "pub fn" only inside a comment
        code = "// pub fn\nfunction _inner() internal {}"
        assert "Missing Access Control" not in _names(AccessControlRule().check(code, contract))

    def test_ir_with_external_function(self):
        contract = ParsedContract(
            dialect=Dialect.SOLIDITY,
            functions=(FunctionDef(name="sweep", visibility=Visibility.EXTERNAL),),
        )
        findings = AccessControlRule().check("function sweep() {}", contract)
        assert "Missing Access Control" in _names(findings)

    def test_parsed_solidity_without_owner_check(self):
        contract = build_contract(SAMPLE_SOLIDITY)
        # SAMPLE_SOLIDITY reads balances[msg.sender] but never compares it
        findings = AccessControlRule().check(SAMPLE_SOLIDITY, contract)
        assert "Missing Access Control" in _names(findings)

    def test_parsed_stylus_counter(self):
        contract = build_contract(SAMPLE_STYLUS_COUNTER)
        findings = AccessControlRule().check(SAMPLE_STYLUS_COUNTER, contract)
        assert "Missing Access Control" in _names(findings)


class TestPrivilegedRoles:

    def test_owner_without_initializer(self):
        findings = AccessControlRule().check("let owner = caller; constructor")
        admin = [f for f in findings if f.name == "Uninitialized Admin Role"]
        assert len(admin) == 1
        assert admin[0].severity == Severity.CRITICAL

    def test_owner_with_initialize_and_constructor(self):
        findings = AccessControlRule().check("owner set in constructor and initialize")
        assert "Uninitialized Admin Role" not in _names(findings)

    def test_roles_without_management(self):
        findings = AccessControlRule().check("mapping(bytes32 => bool) role;")
        assert "Incomplete Role Management" in _names(findings)

    def test_roles_with_management(self):
        findings = AccessControlRule().check("role checks; fn grant_role() {}")
        assert "Incomplete Role Management" not in _names(findings)
