"""Centralized user-facing text for vimman CLI."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"


class Messages:
    APP_HELP = (
        "vimman – view or edit Vim plugin help files like man pages.\n\n"
        "Run `vimman TOPIC` to open TOPIC with :help, or `vimman -e FILE` "
        "to edit every help file named FILE."
    )
    HELP_TARGET = "Help topic (help mode) or help file name (edit mode)."
    HELP_EDIT = "Edit the help file directly instead of using :help."
    HELP_OPEN = "Open a help topic with :help, or edit help files with -e."
    HELP_LIST = "List the help file names offered by shell completion."
    HELP_LIST_VERBOSE = "Append the directory of each help file."
    HELP_LIST_REFRESH = "Rebuild the completion cache before listing."
    HELP_CACHE = "Inspect or manage the completion cache."
    HELP_CACHE_SHOW = "Show the completion cache status."
    HELP_CACHE_CLEAR = "Remove the completion cache."
    HELP_CACHE_REBUILD = "Rescan plugin directories and rewrite the completion cache."
    HELP_CONFIG = "Manage vimman configuration stored in ~/.vimman/config.json."
    HELP_ADD_DIR = "Add a plugin directory to scan (repeatable)."
    HELP_REMOVE_DIR = "Remove a configured plugin directory (repeatable)."
    HELP_CLEAR_DIRS = "Remove every configured plugin directory."
    HELP_SET_VERBOSE = "Show help file directories in completion (true/false)."
    HELP_SET_EXPIRE = "Completion cache expiration in days."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_EDIT_CONFIG = "Open the config file in your editor."

    ERROR_NOT_ENOUGH_ARGUMENTS = "ERROR: not enough arguments"
    ERROR_NOT_ENOUGH_ARGUMENTS_EDIT = "ERROR: not enough arguments (-e)"
    ERROR_NO_MANUAL_ENTRY = "No manual entry for {name}"
    ERROR_EDITOR_LAUNCH = "Unable to launch editor `{editor}`."
    ERROR_BOOLEAN_INVALID = "Invalid boolean value: {value}. Use true/false."
    ERROR_EXPIRE_INVALID = "Expiration must be a positive number of days."
    ERROR_CONFIG_VALUE_INVALID = "Config field `{field}` has an invalid value."
    ERROR_CONFIG_EDITOR_LAUNCH = "Unable to launch editor ({reason})."
    ERROR_CONFIG_EDITOR_FAILED = "Editor exited with status {code}."
    ERROR_CACHE_OPTIONS_CONFLICT = "Use only one of --show, --clear or --rebuild."

    INFO_HELP_COMMAND = ":help {topic}"
    INFO_COMPLETION_UPDATED = " (cache updated)"
    INFO_DIR_ADDED = "Added plugin directory {path}."
    INFO_DIR_REMOVED = "Removed plugin directory {path}."
    INFO_DIR_NOT_CONFIGURED = "Plugin directory {path} is not configured."
    INFO_DIRS_CLEARED = "Cleared configured plugin directories."
    INFO_VERBOSE_SET = "Verbose completion {value}."
    INFO_EXPIRE_SET = "Completion cache expiration set to {value} day(s)."
    INFO_CACHE_INVALIDATED = "Completion cache cleared; it will be rebuilt on next use."
    INFO_CACHE_CLEARED = "Removed the completion cache."
    INFO_CACHE_CLEAR_NONE = "No completion cache found."
    INFO_CACHE_REBUILT = "Completion cache rebuilt with {count} help file(s)."
    INFO_CACHE_SUMMARY = (
        "State: {state}\n"
        "Generated at: {generated}\n"
        "Help files: {count}\n"
        "Expires after: {expire} day(s)\n"
        "Database: {path}"
    )
    INFO_NO_HELP_FILES = "No help files found."
    INFO_CONFIG_SUMMARY = (
        "Verbose completion: {verbose}\n"
        "Cache expiration: {expire} day(s)\n"
        "Config file: {path}"
    )
    INFO_CONFIG_ROOTS = "Search directories:"
    INFO_CONFIG_EDITING = "Opening {path} with {editor}..."
