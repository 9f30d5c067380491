"""Cart-pole simulation with an online REINFORCE-trained neural policy."""
