"""
SensorRepository: configuration-driven access to PurpleAir sensor data.
Registers the configured keys and returns bulk query results as DataFrames.
"""

import logging
import pandas as pd
from pathlib import Path
from typing import List, Optional

from .api_client import ParamsArg, PurpleAirClient
from .config import ClientConfig, load_config
from .errors import PurpleAirError
from .models import GroupID, KeyType, SensorIndex
from .transcoder import SensorDataSet


logger = logging.getLogger(__name__)


class RepositoryError(PurpleAirError):
    """Raised when the repository cannot be set up from its configuration."""
    pass


class SensorRepository:
    """
    Central access point for sensor data.
    Wraps a PurpleAirClient built from configuration.
    """

    def __init__(
        self,
        client: Optional[PurpleAirClient] = None,
        config: Optional[ClientConfig] = None
    ):
        """
        Initialize repository.

        Args:
            client: PurpleAir client (if None, creates from config)
            config: Client configuration (if None, loads from file)
        """
        if config is None:
            config = load_config()

        self.config = config

        if client is None:
            client = PurpleAirClient.from_config(config)

        self.client = client
        self.connected = False

    @classmethod
    def from_config(cls, config_path: Optional[str | Path] = None) -> 'SensorRepository':
        """
        Create repository from configuration file.

        Args:
            config_path: Path to configuration file

        Returns:
            Configured SensorRepository instance
        """
        config = load_config(config_path)
        return cls(config=config)

    def connect(self) -> None:
        """
        Check and retain the configured keys.

        Raises:
            RepositoryError: If no key is configured, or a configured key
                is not of the kind its setting names
            AuthError: If the service rejects a configured key
        """
        if self.connected:
            return

        expected = [
            (self.config.api.read_key, KeyType.READ),
            (self.config.api.write_key, KeyType.WRITE),
        ]
        configured = [(key, kind) for key, kind in expected if key]
        if not configured:
            raise RepositoryError("No API keys configured")

        for key, kind in configured:
            key_type = self.client.set_key(key)
            if key_type != kind:
                raise RepositoryError(
                    f"Configured {kind.value.lower()} key reported as {key_type.value}"
                )

        self.connected = True
        logger.info("Repository connected with %d key(s)", len(configured))

    def disconnect(self) -> None:
        """Close the client session."""
        self.client.close()
        self.connected = False

    def sensors_frame(self, params: ParamsArg) -> pd.DataFrame:
        """
        Run a bulk sensors query and return it as a DataFrame.

        Args:
            params: Bulk query parameters (fields required)

        Returns:
            DataFrame indexed by sensor_index, one column per field
        """
        self.connect()
        return self.to_frame(self.client.sensors_data(params))

    def members_frame(self, group_id: GroupID, params: ParamsArg) -> pd.DataFrame:
        """
        Run a bulk group members query and return it as a DataFrame.

        Args:
            group_id: Group to query
            params: Bulk query parameters (fields required)

        Returns:
            DataFrame indexed by sensor_index, one column per field
        """
        self.connect()
        return self.to_frame(self.client.members_data(group_id, params))

    def group_sensor_indices(self, group_id: GroupID) -> List[SensorIndex]:
        """Sensor indices of every member of a group, sorted."""
        self.connect()
        members = self.client.list_group_members(group_id)
        return sorted(m.sensor_index for m in members)

    @staticmethod
    def to_frame(data: SensorDataSet) -> pd.DataFrame:
        """
        Convert a Bulk Data Set to a DataFrame.

        Args:
            data: Mapping of sensor index to field values

        Returns:
            DataFrame indexed by sensor_index, sorted by index
        """
        if not data:
            return pd.DataFrame(index=pd.Index([], name='sensor_index'))

        df = pd.DataFrame.from_dict(data, orient='index')
        df = df.drop(columns=['sensor_index'], errors='ignore')
        df.index.name = 'sensor_index'
        return df.sort_index()

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
