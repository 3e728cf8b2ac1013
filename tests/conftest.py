"""
Shared test fixtures for the Sentinel test suite.

Provides sample Solidity and Stylus contracts, temporary contract files
and an isolated ConfigManager.
"""

import tempfile
from pathlib import Path

import pytest
from rich.console import Console

from sentinel.config_manager import ConfigManager, SentinelConfig


# ── Sample Solidity contract source ─────────────────────────────

SAMPLE_SOLIDITY = """\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract SimpleToken {
    mapping(address => uint256) public balances;
    uint256 public totalSupply;

    constructor(uint256 _initialSupply) {
        balances[msg.sender] = _initialSupply;
        totalSupply = _initialSupply;
    }

    function transfer(address to, uint256 amount) external {
        require(balances[msg.sender] >= amount, "insufficient balance");
        balances[msg.sender] -= amount;
        balances[to] += amount;
    }

    function balanceOf(address account) public view returns (uint256) {
        return balances[account];
    }

    function _burn(uint256 amount) internal {
        totalSupply -= amount;
    }
}
"""

SAMPLE_SOLIDITY_WIDE_STRUCT = """\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract PositionBook {
    struct Position {
        address holder;
        uint256 amount;
        uint256 start;
        uint256 finish;
        uint256 rate;
        bool active;
    }

    struct Small {
        uint256 a;
        uint256 b;
    }

    mapping(uint256 => Position) public positions;

    function open(uint256 id, uint256 amount) external {
        positions[id].amount = amount;
    }
}
"""

SAMPLE_SOLIDITY_NARROW_STRUCT = """\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract Ledger {
    struct Entry {
        address holder;
        uint256 amount;
        uint256 start;
        uint256 finish;
        bool active;
    }

    mapping(uint256 => Entry) public entries;

    function record(uint256 id, uint256 amount) external {
        entries[id].amount = amount;
    }
}
"""


# ── Sample Stylus (Rust) contract source ────────────────────────

SAMPLE_STYLUS_COUNTER = """\
use stylus_sdk::{prelude::*, msg::Args};

#[stylus_sdk::contract]
pub struct Counter {
    value: StorageU64,
    owner: StorageAddress,
}

#[stylus_sdk::contractimpl]
impl Counter {
    pub fn new() -> Self {
        Self {
            value: StorageU64::new(0),
            owner: StorageAddress::new(msg::sender()),
        }
    }

    pub fn increment(&mut self) {
        require(msg::sender() == self.owner.get(), "Only owner can increment");
        let current = self.value.get();
        self.value.set(current + 1);
    }

    pub fn get(&self) -> u64 {
        self.value.get()
    }

    pub fn transfer_ownership(&mut self, new_owner: Address) {
        require(msg::sender() == self.owner.get(), "Only owner can transfer ownership");
        self.owner.set(new_owner);
    }

    fn reset(&mut self) {
        self.value.set(0);
    }
}
"""

SAMPLE_STYLUS_STAKING = """\
#![cfg_attr(not(feature = "export"), no_main)]
extern crate alloc;

use stylus_sdk::{prelude::*, storage::StorageMap};

sol_storage! {
    #[entrypoint]
    pub struct VulnerableStaking {
        mapping(address => uint256) stakes;
        mapping(address => uint256) rewards;
        uint256 total_staked;
        address owner;
    }
}

impl VulnerableStaking {
    pub fn withdraw(&mut self) -> Result<bool, Vec<u8>> {
        let user = msg::sender();
        let stake = self.stakes.get(&user);
        let reward = self.rewards.get(&user);

        if stake > U256::zero() {
            msg::send(user, stake + reward)?;
            self.stakes.insert(&user, U256::zero());
            self.rewards.insert(&user, U256::zero());
        }

        Ok(true)
    }

    pub fn stake(&mut self) -> Result<bool, Vec<u8>> {
        let amount = msg::value();
        let user = msg::sender();
        let new_stake = self.stakes.get(&user) + amount;
        self.stakes.insert(&user, new_stake);
        self.total_staked = self.total_staked + amount;
        Ok(true)
    }

    pub fn set_rewards(&mut self, user: Address, amount: U256) -> Result<bool, Vec<u8>> {
        self.rewards.insert(&user, amount);
        Ok(true)
    }
}
"""

MALFORMED_SOURCE = "this is {{ not a contract ;; in any ]] language"


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def quiet_console():
    """A rich console that records output instead of printing it."""
    return Console(record=True, width=160, force_terminal=False)


@pytest.fixture
def config_manager(tmp_path, quiet_console):
    """ConfigManager backed by a temporary YAML file."""
    return ConfigManager(str(tmp_path / "config.yaml"), console=quiet_console)


@pytest.fixture
def default_config():
    return SentinelConfig()


@pytest.fixture
def tmp_contract_dir():
    """Temporary directory holding one Solidity and one Stylus contract."""
    with tempfile.TemporaryDirectory(prefix="sentinel_test_") as tmpdir:
        root = Path(tmpdir)
        (root / "SimpleToken.sol").write_text(SAMPLE_SOLIDITY)
        (root / "counter.rs").write_text(SAMPLE_STYLUS_COUNTER)
        (root / "staking.rs").write_text(SAMPLE_STYLUS_STAKING)
        (root / "broken.sol").write_text(MALFORMED_SOURCE)
        yield root
