"""PLCortex: ladder-logic simulation for commissioning and troubleshooting."""
