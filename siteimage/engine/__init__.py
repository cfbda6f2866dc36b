"""Transform resolution, serialization, delivery and static builds."""
