"""Test package for the Lights Out reaction trainer.

Core tests drive the timing generator, scheduler, recorder and state machine
with a fake clock. UI tests run headlessly using pygame's dummy video driver.
To run these tests, execute ``pytest`` from the project root.
"""
