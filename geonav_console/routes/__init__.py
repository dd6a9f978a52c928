"""HTTP and Socket.IO routes for the GeoNav console."""
