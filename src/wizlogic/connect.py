"""
The "Connect" wizard schema: set up a project against a Supabase backend.

One mode ("framework") with four fields:

    framework         which framework the project uses
    frameworkVariant  router/bundler flavour; hidden for frameworks without one
    library           client library; follows the framework's language
    frameworkUi       install the shadcn UI components (nextjs/react only)

Steps switch between generic file setup, framework-specific setup and
the shadcn flow depending on those values.
"""

from wizlogic.expressions import all_of, field_equals, negate, one_of
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

INSTALL_COMMANDS = {
    "supabasejs": "npm install @supabase/supabase-js",
    "supabasepy": "pip install supabase",
    "supabaseflutter": "flutter pub add supabase_flutter",
    "supabaseswift": "swift package add-dependency https://github.com/supabase-community/supabase-swift",
    "supabasekt": 'implementation("io.github.jan-tennert.supabase:supabase-kt:VERSION")',
}

FRAMEWORKS = (
    Option("nextjs", "Next.js"),
    Option("react", "React"),
    Option("remix", "Remix"),
    Option("sveltekit", "SvelteKit"),
    Option("vuejs", "Vue.js"),
    Option("flutter", "Flutter"),
    Option("swift", "iOS Swift"),
    Option("androidkotlin", "Android Kotlin"),
)

FRAMEWORK_VARIANTS = {
    "nextjs": (Option("app", "App Router"), Option("pages", "Pages Router")),
    "react": (Option("vite", "Vite"), Option("cra", "Create React App")),
}

JS_LIBRARY = (Option("supabasejs", "supabase-js"),)

LIBRARIES = {
    "flutter": (Option("supabaseflutter", "supabase-flutter"),),
    "swift": (Option("supabaseswift", "supabase-swift"),),
    "androidkotlin": (Option("supabasekt", "supabase-kt"),),
}

_HAS_VARIANTS = one_of("framework", FRAMEWORK_VARIANTS)
_SHADCN = field_equals("frameworkUi", True)

# Steps are listed in display order; conditions only filter.
STEPS = (
    Step(
        id="install",
        title="Install package",
        description="Run this command to install the required dependencies.",
        content="steps/install",
        command="{{library:install_commands}}",
    ),
    Step(
        id="configure",
        title="Add files",
        description="Copy the following code into your project.",
        content="{{framework}}/{{frameworkVariant}}/{{library}}",
        include_when=negate(_HAS_VARIANTS),
    ),
    Step(
        id="configure-nextjs",
        title="Add files",
        description=(
            "Add env variables, create Supabase client helpers, and set up "
            "middleware to keep sessions refreshed."
        ),
        content="{{framework}}/{{frameworkVariant}}/{{library}}",
        include_when=all_of(field_equals("framework", "nextjs"), negate(_SHADCN)),
    ),
    Step(
        id="configure-react",
        title="Add files",
        description="Add env variables, create a Supabase client, and use it in your app to query data.",
        content="{{framework}}/{{frameworkVariant}}/{{library}}",
        include_when=all_of(field_equals("framework", "react"), negate(_SHADCN)),
    ),
    Step(
        id="shadcn-add",
        title="Add Supabase UI components",
        description="Run this command to install the Supabase shadcn components.",
        content="steps/shadcn/command",
        include_when=_SHADCN,
    ),
    Step(
        id="shadcn-explore",
        title="Check out more UI components",
        description="Add auth, realtime and storage functionality to your project",
        content="steps/shadcn/explore",
        include_when=_SHADCN,
    ),
    Step(
        id="install-skills",
        title="Install Agent Skills (Optional)",
        description=(
            "Agent Skills give AI coding tools ready-made instructions, scripts, and "
            "resources for working with Supabase more accurately and efficiently."
        ),
        content="steps/skills-install",
    ),
)


def build_connect_schema() -> WizardSchema:
    """Return the Connect wizard schema."""
    fields = (
        Field(
            id="framework",
            kind=FieldKind.SELECT,
            label="Framework",
            options=StaticOptions(FRAMEWORKS),
            default_value="nextjs",
            widget="radio-grid",
        ),
        Field(
            id="frameworkVariant",
            kind=FieldKind.SELECT,
            label="Variant",
            options=KeyedOptions(field="framework", by_value=FRAMEWORK_VARIANTS),
            default_value="app",
            depends_on=("framework",),
            visible_when=_HAS_VARIANTS,
            widget="select",
        ),
        Field(
            id="library",
            kind=FieldKind.SELECT,
            label="Library",
            options=KeyedOptions(field="framework", by_value=LIBRARIES, fallback=JS_LIBRARY),
            default_value="supabasejs",
            depends_on=("framework",),
            widget="select",
        ),
        Field(
            id="frameworkUi",
            kind=FieldKind.BOOLEAN,
            label="Shadcn",
            description="Install components via the Supabase shadcn registry.",
            default_value=False,
            depends_on=("framework",),
            visible_when=_HAS_VARIANTS,
            widget="switch",
        ),
    )
    return WizardSchema(
        name="connect",
        modes=(
            Mode(
                id="framework",
                label="Framework",
                description="Use a client library",
                fields=("framework", "frameworkVariant", "library", "frameworkUi"),
            ),
        ),
        fields=fields,
        steps=STEPS,
        tables={"install_commands": dict(INSTALL_COMMANDS)},
    )
