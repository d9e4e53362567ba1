"""
Plain text email templates.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    body: str

    def render(self, **context) -> tuple:
        return self.subject.format(**context), self.body.format(**context)


PASSWORD_RESET = EmailTemplate(
    subject='Reset your Pickleball Fantasy Hub password',
    body=(
        'Hi {name},\n\n'
        'We received a request to reset your password. Use the link below within the next hour:\n\n'
        '{reset_url}\n\n'
        'If you did not ask for this, you can ignore this email.\n'
    ),
)

ACCOUNT_APPROVED = EmailTemplate(
    subject='Your {role} account has been approved',
    body=(
        'Hi {name},\n\n'
        'Your {role} account on Pickleball Fantasy Hub has been approved. You can now sign in:\n\n'
        '{login_url}\n'
    ),
)

ACCOUNT_REJECTED = EmailTemplate(
    subject='Your {role} account request',
    body=(
        'Hi {name},\n\n'
        'Unfortunately your {role} account request was not approved.\n'
        'Reason: {reason}\n'
    ),
)

PAYMENT_RECEIPT = EmailTemplate(
    subject='Payment receipt for {contest}',
    body=(
        'Hi {name},\n\n'
        'We received your payment of {currency} {amount} for {contest}.\n'
        'Order: {order_id}\n'
        'Payment: {payment_id}\n\n'
        'Good luck!\n'
    ),
)

WINNER = EmailTemplate(
    subject='You won a prize in {contest}!',
    body=(
        'Hi {name},\n\n'
        'Congratulations! Your team finished rank {rank} in {contest}.\n'
        'Prize: INR {amount}\n'
        'Processing fee: INR {fee}\n'
        'Credited to your wallet: INR {net_amount}\n\n'
        'Add a bank account to receive the payout: {wallet_url}\n'
    ),
)
