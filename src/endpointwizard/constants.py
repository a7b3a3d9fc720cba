"""Fixed templates and identifiers used by endpointwizard."""

LOCAL_ENDPOINT = "http://localhost:4466"
DEFAULT_CLOUD_API_URL = "https://api.cloud.prisma.sh"
CLOUD_TOKEN_ENV_VAR = "ENDPOINTWIZARD_CLOUD_TOKEN"

DOCKER_COMPOSE_FILE = "docker-compose.yml"
PROJECT_FILE = "prisma.yml"
DATAMODEL_FILE = "datamodel.prisma"

DEFAULT_SERVICE_NAME = "default"
DEFAULT_STAGE_NAME = "default"
DEFAULT_NEW_STAGE = "dev"

DEFAULT_DOCKER_COMPOSE = """version: '3'
services:
  prisma:
    image: prismagraphql/prisma:1.34
    restart: always
    ports:
    - "4466:4466"
    environment:
      PRISMA_CONFIG: |
        port: 4466
        # uncomment the next line and provide the env var PRISMA_MANAGEMENT_API_SECRET=my-secret to activate cluster security
        # managementApiSecret: my-secret
"""

DEFAULT_DATAMODEL = """type User {
  id: ID! @id
  name: String!
}
"""

# Public shared clusters and the AWS region each one runs in.
SHARED_CLUSTER_REGIONS = {
    "prisma-eu1": "eu-west-1",
    "prisma-us1": "us-west-2",
}

REGION_PING_URL = "https://dynamodb.{region}.amazonaws.com/ping"

# Container network aliases that point back to the host machine.
LOCAL_DOCKER_HOST_ALIASES = ("host.docker.internal", "docker.for.mac.localhost")

SYSTEM_SCHEMAS = frozenset(
    {
        "information_schema",
        "pg_catalog",
        "pg_toast",
        "mysql",
        "performance_schema",
        "sys",
    }
)

PUBLIC_NAME_ADJECTIVES = (
    "amber",
    "brave",
    "calm",
    "dusty",
    "eager",
    "fuzzy",
    "gentle",
    "hollow",
    "icy",
    "jolly",
    "lucky",
    "mellow",
    "nimble",
    "quiet",
    "rapid",
    "silent",
    "tidy",
    "vivid",
    "witty",
    "young",
)

PUBLIC_NAME_NOUNS = (
    "badger",
    "comet",
    "delta",
    "falcon",
    "garden",
    "harbor",
    "island",
    "lantern",
    "meadow",
    "otter",
    "pebble",
    "river",
    "summit",
    "thunder",
    "valley",
    "willow",
)
