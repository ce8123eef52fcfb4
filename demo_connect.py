#!/usr/bin/env python3
"""
Demo: Walk through the Connect wizard and print what the user would see.

Shows cascade resets as the framework changes, and writes the schema's
dependency diagram and YAML form next to this script.
"""

import logging

from wizlogic.analyzer import analyze_schema
from wizlogic.backends import DotMode, save_dot_file
from wizlogic.connect import build_connect_schema
from wizlogic.engine import WizardEngine
from wizlogic.schema import SchemaStore
from wizlogic.serialization import schema_to_yaml


def print_session(engine, heading):
    print()
    print("=" * 70)
    print(heading)
    print("=" * 70)
    print(f"  Mode:   {engine.mode}")
    print(f"  Values: {engine.values}")
    print()
    print("  Active fields:")
    for f in engine.active_fields():
        options = engine.get_field_options(f.id)
        choices = ", ".join(o.value for o in options) if options else "-"
        print(f"    {f.id:<18} = {engine.values.get(f.id)!r:<14} options: {choices}")
    print()
    print("  Steps:")
    for i, step in enumerate(engine.resolved_steps(), start=1):
        print(f"    {i}. [{step.id}] {step.title}")
        print(f"       content: {step.content}")
        if step.command:
            print(f"       command: {step.command}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = SchemaStore(build_connect_schema())
    engine = WizardEngine(store)
    print_session(engine, "DEFAULTS")

    for field_id, value in [
        ("framework", "react"),
        ("frameworkUi", True),
        ("framework", "remix"),
        ("framework", "flutter"),
        ("framework", "doesNotExist"),
    ]:
        result = engine.update_field(field_id, value)
        heading = f"update_field({field_id!r}, {value!r})"
        if not result.applied:
            heading += f"  REJECTED: {result.error}"
        elif result.changes:
            heading += f"  cascaded: {', '.join(result.changes)}"
        print_session(engine, heading)

    report = analyze_schema(store)
    print()
    print(f"Schema '{report.schema_name}': {report.total_fields} fields, "
          f"{report.total_steps} steps, warnings: {report.warnings or 'none'}")

    save_dot_file(store, "connect_detailed.dot", mode=DotMode.DETAILED)
    with open("connect.yaml", "w") as fh:
        fh.write(schema_to_yaml(store.schema))
    print("Saved connect_detailed.dot and connect.yaml")
    print("  dot -Tpng connect_detailed.dot -o connect.png")


if __name__ == "__main__":
    main()
