import pytest

from wizlogic.connect import build_connect_schema
from wizlogic.engine import WizardEngine
from wizlogic.expressions import field_equals
from wizlogic.model import (
    Field,
    FieldKind,
    KeyedOptions,
    Mode,
    Option,
    StaticOptions,
    Step,
    WizardSchema,
)
from wizlogic.schema import SchemaStore


@pytest.fixture(scope="session")
def connect_store():
    return SchemaStore(build_connect_schema())


@pytest.fixture
def engine(connect_store):
    return WizardEngine(connect_store)


@pytest.fixture(scope="session")
def two_mode_store():
    """
    Two modes sharing a "region" field.

        client mode: region, sdk, sdkVersion (keyed on sdk), telemetry
        direct mode: region, pooler, port (text, only when pooler is "session")
    """
    fields = [
        Field(id="region", kind=FieldKind.SELECT, default_value="eu",
              options=StaticOptions([Option("eu"), Option("us"), Option("ap")])),
        Field(id="sdk", kind=FieldKind.SELECT, default_value="js",
              options=StaticOptions([Option("js"), Option("py"), Option("go")])),
        Field(id="sdkVersion", kind=FieldKind.SELECT, default_value="v2", depends_on=["sdk"],
              options=KeyedOptions(field="sdk", by_value={
                  "js": [Option("v2"), Option("v1")],
                  "py": [Option("v3")],
              })),
        Field(id="telemetry", kind=FieldKind.BOOLEAN, default_value=True),
        Field(id="pooler", kind=FieldKind.SELECT, default_value="transaction",
              options=StaticOptions([Option("transaction"), Option("session")])),
        Field(id="port", kind=FieldKind.TEXT, default_value="5432", depends_on=["pooler"],
              visible_when=field_equals("pooler", "session")),
    ]
    return SchemaStore(WizardSchema(
        name="two-mode",
        modes=[
            Mode(id="client", label="Client", fields=["region", "sdk", "sdkVersion", "telemetry"]),
            Mode(id="direct", label="Direct", fields=["region", "pooler", "port"]),
        ],
        fields=fields,
        steps=[
            Step(id="pick-region", content="region/{{region}}"),
            Step(id="install-sdk", modes=["client"], content="{{sdk}}@{{sdkVersion}}"),
            Step(id="connect", modes=["direct"], content="{{pooler}}:{{port}}"),
        ],
    ))
