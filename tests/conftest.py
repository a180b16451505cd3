"""
Shared fixtures: small OVAL documents and fake probes.

The sample content has three definitions which, on the fake host, evaluate
to TRUE (environment variable exists), FALSE (its value differs from the
state) and NOT_APPLICABLE (uname is not applicable on the fake host).
"""

import pytest

from oval_core.logic.models import SystemInfo
from oval_core.infrastructure.probes import (
    EnvironmentVariableProbe, ProbeRegistry, ProbeSession, UnameProbe
)
from oval_core.infrastructure.shared.error_handling import ProbeError


DEF_TRUE = "oval:org.test:def:1"
DEF_FALSE = "oval:org.test:def:2"
DEF_NA = "oval:org.test:def:3"

DEFINITIONS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<oval_definitions xmlns="http://oval.mitre.org/XMLSchema/oval-definitions-5"
    xmlns:oval="http://oval.mitre.org/XMLSchema/oval-common-5"
    xmlns:ind="http://oval.mitre.org/XMLSchema/oval-definitions-5#independent"
    xmlns:unix="http://oval.mitre.org/XMLSchema/oval-definitions-5#unix">
  <generator>
    <oval:product_name>tests</oval:product_name>
    <oval:schema_version>5.10</oval:schema_version>
    <oval:timestamp>2024-01-01T00:00:00</oval:timestamp>
  </generator>
  <definitions>
    <definition id="oval:org.test:def:1" version="1" class="compliance">
      <metadata>
        <title>Home variable is set</title>
        <description>OVAL_TEST_HOME exists</description>
      </metadata>
      <criteria operator="AND">
        <criterion test_ref="oval:org.test:tst:1"/>
      </criteria>
    </definition>
    <definition id="oval:org.test:def:2" version="1" class="compliance">
      <metadata>
        <title>Home variable points to /nonexistent</title>
        <description/>
      </metadata>
      <criteria>
        <criterion test_ref="oval:org.test:tst:2"/>
      </criteria>
    </definition>
    <definition id="oval:org.test:def:3" version="2" class="inventory">
      <metadata>
        <title>Kernel information</title>
        <description/>
      </metadata>
      <criteria>
        <criterion test_ref="oval:org.test:tst:3"/>
      </criteria>
    </definition>
  </definitions>
  <tests>
    <ind:environmentvariable_test id="oval:org.test:tst:1" version="1" check="all"
        check_existence="at_least_one_exists" comment="variable exists">
      <ind:object object_ref="oval:org.test:obj:1"/>
    </ind:environmentvariable_test>
    <ind:environmentvariable_test id="oval:org.test:tst:2" version="1" check="all" comment="variable value">
      <ind:object object_ref="oval:org.test:obj:1"/>
      <ind:state state_ref="oval:org.test:ste:1"/>
    </ind:environmentvariable_test>
    <unix:uname_test id="oval:org.test:tst:3" version="1" check="all" comment="uname">
      <unix:object object_ref="oval:org.test:obj:2"/>
    </unix:uname_test>
  </tests>
  <objects>
    <ind:environmentvariable_object id="oval:org.test:obj:1" version="1">
      <ind:name>OVAL_TEST_HOME</ind:name>
    </ind:environmentvariable_object>
    <unix:uname_object id="oval:org.test:obj:2" version="1"/>
  </objects>
  <states>
    <ind:environmentvariable_state id="oval:org.test:ste:1" version="1">
      <ind:value>/nonexistent</ind:value>
    </ind:environmentvariable_state>
  </states>
</oval_definitions>
"""

SYSCHAR_XML = """<?xml version="1.0" encoding="UTF-8"?>
<oval_system_characteristics xmlns="http://oval.mitre.org/XMLSchema/oval-system-characteristics-5"
    xmlns:oval="http://oval.mitre.org/XMLSchema/oval-common-5"
    xmlns:ind-sc="http://oval.mitre.org/XMLSchema/oval-system-characteristics-5#independent">
  <generator>
    <oval:product_name>tests</oval:product_name>
    <oval:schema_version>5.10</oval:schema_version>
    <oval:timestamp>2024-01-01T00:00:00</oval:timestamp>
  </generator>
  <system_info>
    <os_name>Linux</os_name>
    <os_version>6.1</os_version>
    <architecture>x86_64</architecture>
    <primary_host_name>recorded-host</primary_host_name>
    <interfaces>
      <interface>
        <interface_name>lo</interface_name>
        <ip_address>127.0.0.1</ip_address>
        <mac_address>00:00:00:00:00:00</mac_address>
      </interface>
    </interfaces>
  </system_info>
  <collected_objects>
    <object id="oval:org.test:obj:1" version="1" flag="complete">
      <reference item_ref="10"/>
    </object>
    <object id="oval:org.test:obj:2" version="1" flag="not applicable"/>
  </collected_objects>
  <system_data>
    <ind-sc:environmentvariable_item id="10" status="exists">
      <ind-sc:name>OVAL_TEST_HOME</ind-sc:name>
      <ind-sc:value>/home/tester</ind-sc:value>
    </ind-sc:environmentvariable_item>
  </system_data>
</oval_system_characteristics>
"""


class FakeSysinfoProbe:
    """System info source that never touches the host."""

    def collect(self):
        return SystemInfo(
            os_name="Linux",
            os_version="6.1",
            architecture="x86_64",
            primary_host_name="test-host"
        )


class FailingSysinfoProbe:
    def collect(self):
        raise ProbeError("Failed to query system information.", code=5, description="probe unavailable")


class NotApplicableUnameProbe(UnameProbe):
    def is_applicable(self):
        return False


class FailingEnvironmentProbe(EnvironmentVariableProbe):
    def collect(self, obj):
        raise ProbeError("Failed to collect object.", code=7, description="environment probe crashed")


def build_registry(environ=None, env_probe_class=EnvironmentVariableProbe):
    registry = ProbeRegistry()
    registry.register(env_probe_class(environ={"OVAL_TEST_HOME": "/home/tester"} if environ is None else environ))
    registry.register(NotApplicableUnameProbe())
    return registry


@pytest.fixture
def definitions_file(tmp_path):
    path = tmp_path / "test-oval.xml"
    path.write_text(DEFINITIONS_XML, encoding="utf-8")
    return path


@pytest.fixture
def syschar_file(tmp_path):
    path = tmp_path / "test-syschar.xml"
    path.write_text(SYSCHAR_XML, encoding="utf-8")
    return path


@pytest.fixture
def probe_registry():
    return build_registry()


@pytest.fixture
def probe_session_factory(probe_registry):
    """Builds probe sessions over the fake registry and fake system info."""
    def factory(syschar_model):
        return ProbeSession(syschar_model, registry=probe_registry, sysinfo_probe=FakeSysinfoProbe())
    return factory


@pytest.fixture
def session_factory(probe_session_factory):
    """Evaluation session factory for EvaluateDefinitionsUseCase."""
    from oval_core.logic.services.evaluation_session import EvaluationSession

    def factory(definition_model, name):
        return EvaluationSession(definition_model, name, probe_session_factory=probe_session_factory)
    return factory


@pytest.fixture
def registry_factory():
    """Builds a fake registry for a given environment."""
    return build_registry


@pytest.fixture
def fake_sysinfo_probe():
    return FakeSysinfoProbe()


@pytest.fixture
def failing_sysinfo_probe():
    return FailingSysinfoProbe()


@pytest.fixture
def failing_object_registry():
    """Registry whose environment probe aborts collection with a ProbeError."""
    return build_registry(env_probe_class=FailingEnvironmentProbe)
