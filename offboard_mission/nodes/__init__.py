"""ROS 2 entry points."""
