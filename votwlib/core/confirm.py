#!/usr/bin/env python3

"""
Confirmation policies handed to the assembler and the grid encoder.

A policy is any callable taking a prompt and returning True to continue.
"""

from votwlib.core.errors import ConfirmationRequired

#============================================

def ask_user(prompt: str) -> bool:
	answer = input(prompt)
	return answer.strip().lower() == "y"

#============================================

def always_yes(prompt: str) -> bool:
	print(f"{prompt}Y")
	return True

#============================================

def always_no(prompt: str) -> bool:
	print(f"{prompt}N")
	return False

#============================================

def refuse(prompt: str) -> bool:
	raise ConfirmationRequired(prompt.strip())

#============================================

def policy_for_mode(mode: str):
	policies = {
		'ask': ask_user,
		'yes': always_yes,
		'no': always_no,
		'strict': refuse,
	}
	if mode not in policies:
		raise ValueError(f"unknown confirmation mode: {mode}")
	return policies[mode]
