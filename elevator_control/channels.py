"""
Redis Pub/Sub channel definitions for the elevator service.
Publishers and subscribers both import the channel names from here.
"""

# The service drives exactly one car
ELEVATOR_ID = 1

# Channel carrying state snapshots of a specific elevator (format with elevator ID)
# Example usage: ELEVATOR_STATUS.format(1) -> "elevator:status:1"
ELEVATOR_STATUS = "elevator:status:{}"
