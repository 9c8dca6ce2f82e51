from .errors import GuardedAccessError, OverrideError, RestorationFailure, SettingWriteError
from .helpers import (
    capture_output,
    guard_names,
    local_options,
    namespace_lookup,
    with_dir,
    with_envvar,
    with_options,
    with_setting,
)
from .override import (
    OverrideState,
    ScopedOverride,
    arun_with_override,
    arun_with_override_ref,
    override_many,
    run_with_override,
    run_with_override_ref,
)
from .setting import MISSING, FunctionSetting, GuardedBinding, MutableSetting, SwapSetting
from .targets import (
    STDERR,
    STDOUT,
    WORKING_DIRECTORY,
    AttributeSetting,
    ContextVarSetting,
    EnvironmentVariable,
    MappingEntry,
    Option,
    OptionTable,
    OptionTableContents,
    StreamSetting,
    WorkingDirectory,
    default_options,
    reset_default_options,
)

__all__ = [
    "MISSING",
    "STDERR",
    "STDOUT",
    "WORKING_DIRECTORY",
    "AttributeSetting",
    "ContextVarSetting",
    "EnvironmentVariable",
    "FunctionSetting",
    "GuardedAccessError",
    "GuardedBinding",
    "MappingEntry",
    "MutableSetting",
    "Option",
    "OptionTable",
    "OptionTableContents",
    "OverrideError",
    "OverrideState",
    "RestorationFailure",
    "ScopedOverride",
    "SettingWriteError",
    "StreamSetting",
    "SwapSetting",
    "WorkingDirectory",
    "arun_with_override",
    "arun_with_override_ref",
    "capture_output",
    "default_options",
    "guard_names",
    "local_options",
    "namespace_lookup",
    "override_many",
    "reset_default_options",
    "run_with_override",
    "run_with_override_ref",
    "with_dir",
    "with_envvar",
    "with_options",
    "with_setting",
]
