"""
Well-known identifiers shared with the host platform.

These values must match the platform exactly; they are looked up by
name in capability registries, configuration admin and variable spaces.
"""

# Capability ids
PENTAHO_SERVER_CAPABILITY_ID = "pentaho-server"
JAAS_CAPABILITY_ID = "pentaho-kerberos-jaas"
AEL_SECURITY_CAPABILITY_ID = "ael-security"

# Configuration admin key for ZooKeeper discovery
DISCOVERY_CONFIG_KEY = "org.apache.aries.rsa.discovery.zookeeper"

# Discovery properties
ZOOKEEPER_HOST = "zookeeper.host"
ZOOKEEPER_PORT = "zookeeper.port"

# Variables
DAEMON_VERSION_VARIABLE = "KETTLE_AEL_PDI_DAEMON_VERSION"
ENGINE = "engine"
ENGINE_REMOTE = "engine.remote"
ENGINE_PROTOCOL = "engine.protocol"
ENGINE_HOST = "engine.host"
ENGINE_PORT = "engine.port"

# Engine selector values
ENGINE_REMOTE_VALUE = "remote"
ENGINE_SPARK_VALUE = "spark"

# Defaults
DEFAULT_PROTOCOL = "http"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_ZOOKEEPER_PORT = "2181"
DEFAULT_WEBSOCKET_PORT = "53000"
DEFAULT_DAEMON_VERSION = "2.0"

# Numeric version used when the daemon version variable is not a number
FALLBACK_DAEMON_VERSION = 1.0
