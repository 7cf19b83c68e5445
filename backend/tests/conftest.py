"""Pytest configuration and fixtures."""

import textwrap

import pytest

from defyshield.analyzers.static_analyzer import StaticAnalyzer
from defyshield.parsers.solidity_parser import SolidityParser

CONTRACT_ADDRESS = "0x1234567890123456789012345678901234567890"

# Sample Solidity contracts for testing
SAMPLE_REENTRANCY = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract ReentrancyVulnerable {
        mapping(address => uint) public balances;

        function withdraw() public {
            uint bal = balances[msg.sender];
            require(bal > 0);

            // Vulnerable: external call before state update
            (bool sent, bytes memory data) = msg.sender.call{value: bal}("");
            require(sent, "Failed to send Ether");

            // State update after external call
            balances[msg.sender] = 0;
        }

        function deposit() public payable {
            balances[msg.sender] += msg.value;
        }
    }
''')

SAMPLE_REENTRANCY_SAFE = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract SafeVault {
        mapping(address => uint) public balances;

        function withdraw() public {
            uint bal = balances[msg.sender];
            require(bal > 0);
            balances[msg.sender] = 0;
            (bool sent, bytes memory data) = msg.sender.call{value: bal}("");
            require(sent, "Failed to send Ether");
        }
    }
''')

SAMPLE_ACCESS_CONTROL = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract AccessControlVulnerable {
        address public owner;
        uint public fee = 100;

        constructor() {
            owner = msg.sender;
        }

        // Secure function with access control
        function secureFeeUpdate(uint newFee) public {
            require(msg.sender == owner, "Not owner");
            fee = newFee;
        }

        // Vulnerable: No access control
        function vulnerableFeeUpdate(uint newFee) public {
            fee = newFee;
        }
    }
''')

SAMPLE_GAS = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract GasInefficient {
        uint[] public values;
        uint public total;
        uint public last;

        function processAll(address[] memory users) public {
            for (uint i = 0; i < users.length; i++) {
                total = total + i;
                last = i;
            }
        }

        function fixedLoop() public {
            for (uint i = 0; i < 10; i++) {
                values.push(i);
            }
        }
    }
''')

SAMPLE_LOGIC = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract LogicErrorVulnerable {
        uint public threshold = 100;
        uint public counter;

        // Logic error: inconsistent boundary checks
        function processValue(uint value) public {
            if (value > threshold) {
                counter = 1;
            }

            if (value >= threshold) {
                counter = 2;
            }
        }

        // Function missing state updates
        function updateData() public {
        }
    }
''')

SAMPLE_VISIBILITY = textwrap.dedent('''\
    // SPDX-License-Identifier: MIT
    pragma solidity ^0.8.0;

    contract Registry {
        uint private stored;

        function get() public view returns (uint) {
            return stored;
        }

        function double(uint x) public pure returns (uint) {
            return x * 2;
        }

        function helper() internal {
        }

        function ping() external {
        }
    }
''')

SAMPLE_INVALID = textwrap.dedent('''\
    // Invalid Solidity code
    contract Broken {
        function broken {
            // Missing parentheses
        }
    }
''')


def line_of(source: str, fragment: str) -> int:
    """1-based line number of the first line containing ``fragment``."""
    for number, line in enumerate(source.splitlines(), 1):
        if fragment in line:
            return number
    raise AssertionError(f"{fragment!r} not in source")


@pytest.fixture(scope="session")
def parser():
    """Shared tree-sitter Solidity parser."""
    return SolidityParser()


@pytest.fixture
def analyzer(parser):
    """Static analyzer with the default detector set."""
    return StaticAnalyzer(parser=parser)


@pytest.fixture
def contract_address():
    return CONTRACT_ADDRESS


@pytest.fixture(name="line_of")
def line_of_fixture():
    """Helper locating a source fragment's line."""
    return line_of


@pytest.fixture
def sample_reentrancy():
    """External call before the balance is zeroed."""
    return SAMPLE_REENTRANCY


@pytest.fixture
def sample_reentrancy_safe():
    """Checks-effects-interactions ordering."""
    return SAMPLE_REENTRANCY_SAFE


@pytest.fixture
def sample_access_control():
    """One guarded and one unguarded setter."""
    return SAMPLE_ACCESS_CONTROL


@pytest.fixture
def sample_gas():
    """Loop over a dynamic array with two writes per iteration."""
    return SAMPLE_GAS


@pytest.fixture
def sample_logic():
    """Inconsistent comparisons and a function without state updates."""
    return SAMPLE_LOGIC


@pytest.fixture
def sample_visibility():
    """View, pure, internal and external functions."""
    return SAMPLE_VISIBILITY


@pytest.fixture
def sample_invalid():
    """Syntactically invalid source."""
    return SAMPLE_INVALID
