"""Constants shared across the runtime library modules."""

MAVEN_CENTRAL = "https://repo1.maven.org/maven2/"
JITPACK = "https://jitpack.io/"
JCENTER = "https://jcenter.bintray.com/"
AIKAR = "https://repo.aikar.co/content/groups/aikar/"

DEFAULT_LIBRARIES_FOLDER = "libs"

ARCHIVE_SUFFIX = ".jar"
RELOCATED_SUFFIX = "-relocated.jar"
PARTIAL_SUFFIX = ".part"

# Characters accepted in declared relocation patterns in place of a dot.
PATTERN_ESCAPES = ("#", "/")
