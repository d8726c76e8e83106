"""
Transaction Assembler
=====================
Turns TransferIntents (and memo / tip requests) into signed, wire-ready
legacy transactions bound to a caller-supplied liveness anchor.

    TransferIntent ─┬─ mint is None ─→ system transfer
                    └─ mint set ─────→ [create ATA] + SPL transfer

Every transaction is signed only by its own fee payer (partial signing);
the bundle engine never countersigns.
"""

import asyncio
from typing import List, Optional, Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction
from spl.memo.constants import MEMO_PROGRAM_ID
from spl.memo.instructions import MemoParams, create_memo
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    TransferParams as TokenTransferParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer as token_transfer,
)

from jito_bundler.shared.execution.errors import AssemblyError
from jito_bundler.shared.execution.schemas import SignedTransaction, SigningIdentity, TransferIntent
from jito_bundler.shared.infrastructure.rpc_client import SolanaRpc
from jito_bundler.shared.system.logging import Logger


class TransactionAssembler:
    def __init__(self, rpc: SolanaRpc):
        self.rpc = rpc

    # =========================================================================
    # INTENTS
    # =========================================================================

    async def build(
        self,
        intent: TransferIntent,
        anchor: Hash,
        create_destination: Optional[bool] = None,
    ) -> SignedTransaction:
        if intent.is_token:
            return await self.build_token_transfer(intent, anchor, create_destination)
        return await self.build_sol_transfer(intent, anchor)

    async def build_batch(self, intents: Sequence[TransferIntent], anchor: Hash) -> List[SignedTransaction]:
        """
        Assemble independent intents concurrently.

        Order of the result matches the order of intents. The first failure
        propagates and nothing is returned. A missing destination token
        account is created once, by the first intent paying into it.
        """
        create_flags = await self._plan_account_creation(intents)
        return list(await asyncio.gather(*(
            self.build(intent, anchor, create_destination=flag)
            for intent, flag in zip(intents, create_flags)
        )))

    async def _plan_account_creation(self, intents: Sequence[TransferIntent]) -> List[Optional[bool]]:
        """Per intent: create the destination ATA or not (None for SOL transfers)."""
        dest_atas = [
            get_associated_token_address(intent.destination, intent.mint) if intent.is_token else None
            for intent in intents
        ]
        unique = list(dict.fromkeys(ata for ata in dest_atas if ata is not None))
        existing = await asyncio.gather(*(self.rpc.account_exists(ata) for ata in unique))
        missing = {ata for ata, exists in zip(unique, existing) if not exists}

        flags: List[Optional[bool]] = []
        for ata in dest_atas:
            if ata is None:
                flags.append(None)
            else:
                flags.append(ata in missing)
                missing.discard(ata)
        return flags

    async def build_sol_transfer(self, intent: TransferIntent, anchor: Hash) -> SignedTransaction:
        self._check_intent(intent)
        ix = transfer(TransferParams(
            from_pubkey=intent.source.pubkey,
            to_pubkey=intent.destination,
            lamports=intent.amount,
        ))
        Logger.debug(f"[ASSEMBLER] SOL transfer {intent.amount} lamports "
                     f"{intent.source.address[:8]}... -> {str(intent.destination)[:8]}...")
        return self._sign([ix], intent.source, anchor)

    async def build_token_transfer(
        self,
        intent: TransferIntent,
        anchor: Hash,
        create_destination: Optional[bool] = None,
    ) -> SignedTransaction:
        """
        SPL transfer between associated token accounts.

        When the destination ATA does not exist yet, its creation is
        prepended to the same transaction, paid by the source wallet.
        An explicit create_destination skips the ledger lookup.
        """
        self._check_intent(intent)
        if intent.mint is None:
            raise AssemblyError("Token transfer requires a mint")

        owner = intent.source.pubkey
        source_ata = get_associated_token_address(owner, intent.mint)
        dest_ata = get_associated_token_address(intent.destination, intent.mint)

        instructions: List[Instruction] = []
        if create_destination is None:
            create_destination = not await self.rpc.account_exists(dest_ata)
        if create_destination:
            Logger.debug(f"[ASSEMBLER] Creating ATA {str(dest_ata)[:8]}... for {str(intent.destination)[:8]}...")
            instructions.append(create_associated_token_account(owner, intent.destination, intent.mint))

        instructions.append(token_transfer(TokenTransferParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source_ata,
            dest=dest_ata,
            owner=owner,
            amount=intent.amount,
        )))
        return self._sign(instructions, intent.source, anchor)

    # =========================================================================
    # MEMO & TIP
    # =========================================================================

    def build_memo(
        self,
        signer: SigningIdentity,
        message: str,
        anchor: Hash,
        tip_account: Optional[Pubkey] = None,
        tip_lamports: int = 0,
    ) -> SignedTransaction:
        """Memo transaction; with tip_account set, the tip is its last instruction."""
        self._check_identity(signer)
        instructions = [create_memo(MemoParams(
            program_id=MEMO_PROGRAM_ID,
            signer=signer.pubkey,
            message=message.encode("utf-8"),
        ))]
        if tip_account is not None:
            instructions.append(self._tip_instruction(signer, tip_account, tip_lamports))
        return self._sign(instructions, signer, anchor, is_tip=tip_account is not None)

    def build_tip(self, payer: SigningIdentity, tip_account: Pubkey, lamports: int, anchor: Hash) -> SignedTransaction:
        self._check_identity(payer)
        return self._sign([self._tip_instruction(payer, tip_account, lamports)], payer, anchor, is_tip=True)

    def _tip_instruction(self, payer: SigningIdentity, tip_account: Pubkey, lamports: int) -> Instruction:
        if lamports <= 0:
            raise AssemblyError(f"Tip must be positive, got {lamports}")
        return transfer(TransferParams(
            from_pubkey=payer.pubkey,
            to_pubkey=tip_account,
            lamports=lamports,
        ))

    # =========================================================================
    # SIGNING
    # =========================================================================

    def _sign(
        self,
        instructions: List[Instruction],
        payer: SigningIdentity,
        anchor: Hash,
        is_tip: bool = False,
    ) -> SignedTransaction:
        message = Message.new_with_blockhash(instructions, payer.pubkey, anchor)
        tx = Transaction.new_unsigned(message)
        tx.partial_sign([payer.keypair], anchor)
        return SignedTransaction(
            transaction=tx,
            anchor=anchor,
            signers=(payer.address,),
            is_tip=is_tip,
        )

    @staticmethod
    def _check_identity(identity: SigningIdentity) -> None:
        if not isinstance(identity, SigningIdentity) or not isinstance(identity.keypair, Keypair):
            raise AssemblyError(f"No usable keypair for signer ({type(identity).__name__})")

    def _check_intent(self, intent: TransferIntent) -> None:
        self._check_identity(intent.source)
        if not isinstance(intent.amount, int) or intent.amount <= 0:
            raise AssemblyError(f"Transfer amount must be a positive integer, got {intent.amount!r}")
