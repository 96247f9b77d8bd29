"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Resolution Errors
    EMPTY_QUERY = "Empty query"
    NO_SEARCH_RESULTS = "No search results"
    UNSUPPORTED_SOURCE = "Only YouTube URLs supported"
    UNPLAYABLE_URL = "Unplayable URL"
    SEARCH_FAILED = "Search failed: {error}"
    PLAYLIST_LOADING_FAILED = "Playlist loading failed: {error}"
    PLAYLIST_EMPTY = "Playlist has no videos"
    PLAYLIST_NO_PLAYABLE = "Playlist has no playable videos"

    # Cross-service Errors
    SPOTIFY_NOT_CONFIGURED = "Spotify links need SPOTIFY__CLIENT_ID and SPOTIFY__CLIENT_SECRET"
    SPOTIFY_UNSUPPORTED_RESOURCE = "Unsupported Spotify resource"
    SPOTIFY_EMPTY_PLAYLIST = "Empty Spotify playlist"
    SPOTIFY_NO_MATCH = "No YouTube match for Spotify track"
    SPOTIFY_NO_MATCH_PLAYLIST = "No YouTube match for first playlist track"
    SPOTIFY_LOOKUP_FAILED = "Spotify lookup failed: {error}"

    # Playback Strategy Errors
    NO_DIRECT_URL = "No direct media URL in extractor output"
    NO_AUDIO_FORMAT = "No audio-only format available"
    EXTRACTOR_EXITED = "yt-dlp exited with code {code}: {stderr}"
    EXTRACTOR_BAD_JSON = "yt-dlp returned invalid JSON"
    EXTRACTOR_NOT_FOUND = "Executable not found: {executable}"
    EXTRACTOR_NOT_RUNNABLE = "Cannot run {executable}: {error}"
    SOURCE_CREATION_FAILED = "Could not create audio source: {error}"

    # Voice Errors
    VOICE_NOT_CONNECTED = "Not connected to voice in guild {guild_id}"
    VOICE_CHANNEL_INVALID = "Channel {channel_id} is not a voice channel"
    VOICE_CONNECT_TIMEOUT = "Timed out joining voice channel {channel_id}"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_SNOWFLAKE = "Discord snowflake ID must be a positive 64-bit integer"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_CONNECT_FAILED = "Voice connection failed in guild %s: %s"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_NO_EVENT_SINK = "No event sink registered for guild %s"
    VOICE_EVENT_SINK_ERROR = "Error delivering %s to guild %s"

    # Transport Events
    TRANSPORT_TRACK_ENDED = "Transport finished session %s in guild %s (error: %s)"
    TRANSPORT_TRANSIENT_ERROR = "Stream interruption in guild %s, not skipping: %s"
    TRANSPORT_FATAL_ERROR = "Playback error in guild %s: %s"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s via %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ALL_FAILED = "All playback methods failed for '%s' in guild %s"
    PLAYBACK_INVALID_LOCATOR = "Dropping track with unplayable locator %s in guild %s"
    PLAYBACK_NOT_CONNECTED = "Not starting '%s' in guild %s: no voice connection"
    PLAYBACK_HANDLE_DISCARDED = "Queue changed while acquiring a stream in guild %s, discarding it"

    # Pipeline
    PIPELINE_ATTEMPT = "Trying %s strategy for %s"
    PIPELINE_STRATEGY_FAILED = "%s strategy failed for %s: %s"
    PIPELINE_STRATEGY_CRASHED = "%s strategy raised unexpectedly for %s"
    PIPELINE_STRATEGY_SUCCEEDED = "%s strategy produced a stream for %s"
    PIPELINE_PRIMARY_DISABLED = "Primary stream strategies disabled, using extractor only"

    # Queue Operations
    QUEUE_ADDED = "Queued '%s' at position %s in guild %s"
    QUEUE_PLAYLIST_ADDED = "Queued playlist '%s' (%s of %s items) in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"
    QUEUE_ENDED = "Queue ended in guild %s"
    QUEUE_ADVANCING = "Track '%s' finished in guild %s, moving to next"
    QUEUE_SKIPPED = "Skip requested for '%s' in guild %s"
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_CLOSED = "Closed queue for guild %s"
    QUEUE_CLOSE_FAILED = "Failed to close queue for guild %s"
    QUEUE_STATE_CHANGED = "Guild %s: %s -> %s"

    # Event Dispatch
    EVENT_STALE = "Ignoring %s for stale session %s in guild %s (current %s)"
    EVENT_DURING_TRANSITION = "Holding %s until the transition in guild %s finishes"
    EVENT_EMPTY_QUEUE = "Ignoring %s with empty queue in guild %s"

    # Notifications
    NOTIFY_FAILED = "Failed to send notification to guild %s"
    NOW_PLAYING_SEND_FAILED = "Failed to send now-playing embed in guild %s"
    NOW_PLAYING_EDIT_FAILED = "Failed to update now-playing embed in guild %s"

    # Resolution/Search
    RESOLVE_STARTED = "Resolving %r as %s"
    RESOLVE_FAILED = "Failed to resolve %r: %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    PLAYLIST_PRIMARY_INCOMPLETE = "Playlist listing for %s returned %s of %s expected items"
    PLAYLIST_FALLBACK = "Primary playlist listing failed for %s, trying yt-dlp executable"
    PLAYLIST_FALLBACK_COLLECTED = "yt-dlp fallback collected %s entries for %s"
    PLAYLIST_FALLBACK_FAILED = "yt-dlp playlist fallback failed for %s: %s"
    METADATA_PRIMARY_FAILED = "oEmbed metadata lookup failed for %s: %s"
    METADATA_SECONDARY_FAILED = "Metadata extraction failed (non-fatal) for %s: %s"
    SPOTIFY_RESOLVED = "Spotify %s resolved to search terms %r"

    # Extractor Subprocess
    EXTRACTOR_SPAWN = "Running %s for %s"
    EXTRACTOR_DIRECT_URL = "Extractor direct URL length: %s"

    # Application Lifecycle
    BOT_STARTING = "Starting SenaBot in {environment} mode"
    LOGGING_CONFIG_FALLBACK = "Logging config %s unusable (%s), using basic stderr logging"
    DEPENDENCY_FOUND = "Found %s at %s"
    DEPENDENCY_MISSING = "%s not found on PATH, playback may fail"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Shutdown did not finish within %ss"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_SYNC_ON_STARTUP_FAILED = "Command sync on startup failed: %s"

    # Bot Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    COMMAND_PLAY_FAILED = "Play failed in guild %s for %r"
    COMMAND_SEARCH_FAILED = "Search command failed for %r"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions
    and in the queue's bound text channel.
    """

    # Queue Notifications
    QUEUE_ENDED = "Queue ended."
    PLAYBACK_ERROR = "Playback error: {error}"
    ALL_METHODS_FAILED = "All playback methods failed, skipping…"
    INVALID_URL_SKIPPING = "Invalid URL, skipping…"
    STOPPED_AND_CLEARED = "⏹️ Stopped and cleared queue."
    FAILED_TO_JOIN_VOICE = "Failed to join voice channel."

    # Command Replies
    JOIN_VOICE_FIRST = "Join a voice channel first…"
    NEED_CONNECT_PERMISSION = "Need Connect permission."
    NEED_SPEAK_PERMISSION = "Need Speak permission."
    SOUNDCLOUD_DISABLED = "SoundCloud disabled."
    NOTHING_PLAYING = "Nothing is playing…"
    QUEUE_EMPTY = "The queue is empty…"
    QUEUE_NOW_EMPTY = "The queue is now empty."
    INVALID_QUEUE_NUMBER = "Invalid queue number…"
    REMOVED_TRACK = "Removed **{title}** from queue."
    SKIPPED = "Skipped ♪"
    NOTHING_TO_SKIP = "Nothing to skip."
    STOPPED = "Stopped playback and cleared queue."
    PAUSED = "Paused."
    PAUSE_FAILED = "Couldn't pause."
    RESUMED = "Resumed."
    RESUME_FAILED = "Couldn't resume."
    VOLUME_NOT_IMPLEMENTED = "Volume control not implemented yet."
    PLAY_FAILED = "Search/play failed: {error}"
    SEARCH_FAILED = "Search failed: {error}"
    NO_RESULTS = "No results found for that search."
    NOT_YOUR_SEARCH = "Only the person who searched can select a song."
    ADD_FAILED = "Failed to add song: {error}"
    OTHER_SERVER_QUEUE = "This queue is for a different server."
    SERVER_ONLY = "This command can only be used in a server."
    ERROR_COMMAND_FAILED = "❌ Command failed. See logs."

    # Embed Titles
    EMBED_NOW_PLAYING = "🎶 Now Playing"
    EMBED_ADDED_TO_QUEUE = "➕ Added to Queue"
    EMBED_PLAYLIST_QUEUED = "📚 Playlist Queued"
    EMBED_SEARCH_RESULTS = "🔍 Search Results"
    EMBED_QUEUE = "🎀 Queue"
    EMBED_SHUFFLED = "🔀 Queue Shuffled"

    # Embed Text
    PLAYLIST_DESCRIPTION = "Added **{count}** tracks from **{title}**"
    SEARCH_DESCRIPTION = "Found {count} result(s) for: **{query}**\n\nClick a button below to play:"
    REQUESTED_BY = "Requested by {name}"
    QUEUE_FOOTER = "Page {page}/{total_pages} • {count} song{plural} total"
    UNKNOWN = "Unknown"
    STARTING = "Starting…"
