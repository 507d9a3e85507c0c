"""Tests des controles d'integrite referentielle."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from douanapp.core.exceptions import IntegrityViolationError, NotFoundError
from douanapp.models.entities import Client, Dossier, Facture, Location, TypeVehicule
from douanapp.services.integrite import (
    client_en_usage, dossier_a_factures, libelle_type_vehicule,
    supprimer_client, supprimer_dossier, supprimer_type_vehicule,
    type_vehicule_en_usage,
)
from douanapp.storage.backends import MemoireStorage
from douanapp.storage.repositories import DataStore


class TestClientEnUsage:

    def setup_method(self):
        self.store = DataStore(MemoireStorage())
        self.client = self.store.clients.enregistrer(Client(nom="Diallo", prenom="Amadou"))

    def test_client_libre(self):
        assert client_en_usage(self.store, self.client.id) is False
        supprimer_client(self.store, self.client.id)
        assert self.store.clients.lister() == []

    def test_reference_par_dossier(self):
        self.store.dossiers.enregistrer(Dossier(numero_ch="CH-1", client_id=self.client.id))
        assert client_en_usage(self.store, self.client.id) is True
        with pytest.raises(IntegrityViolationError):
            supprimer_client(self.store, self.client.id)
        assert self.store.clients.get_par_id(self.client.id) is not None

    def test_reference_par_facture(self):
        self.store.factures.enregistrer(Facture(client_id=self.client.id))
        assert client_en_usage(self.store, self.client.id) is True

    def test_reference_par_location(self):
        self.store.locations.enregistrer(Location(client_id=self.client.id))
        assert client_en_usage(self.store, self.client.id) is True

    def test_client_inconnu(self):
        with pytest.raises(NotFoundError):
            supprimer_client(self.store, "inconnu")


class TestTypeVehicule:

    def setup_method(self):
        self.store = DataStore(MemoireStorage())
        self.type = self.store.types_vehicule.enregistrer(TypeVehicule(label="Benne"))

    def test_type_libre_supprime(self):
        supprimer_type_vehicule(self.store, self.type.id)
        assert self.store.types_vehicule.get_par_label("Benne") is None

    def test_reference_par_libelle(self):
        self.store.locations.enregistrer(Location(type_camion="Benne"))
        assert type_vehicule_en_usage(self.store, "Benne") is True
        with pytest.raises(IntegrityViolationError):
            supprimer_type_vehicule(self.store, self.type.id)

    def test_reference_par_identifiant_apres_renommage(self):
        self.store.dossiers.enregistrer(Dossier(
            numero_ch="CH-1", type_vehicule="Benne", type_vehicule_id=self.type.id,
        ))
        self.type.label = "Benne basculante"
        self.store.types_vehicule.enregistrer(self.type)
        assert type_vehicule_en_usage(self.store, "Benne basculante", self.type.id) is True
        dossier = self.store.dossiers.get_par_numero_ch("CH-1")
        assert libelle_type_vehicule(self.store, dossier) == "Benne basculante"

    def test_identifiant_different_meme_libelle(self):
        self.store.dossiers.enregistrer(Dossier(
            numero_ch="CH-1", type_vehicule="Benne", type_vehicule_id="autre",
        ))
        assert type_vehicule_en_usage(self.store, "Benne", self.type.id) is False

    def test_libelle_sans_type(self):
        location = Location(type_camion="Plateau")
        assert libelle_type_vehicule(self.store, location) == "Plateau"


class TestDossier:

    def setup_method(self):
        self.store = DataStore(MemoireStorage())
        self.dossier = self.store.dossiers.enregistrer(Dossier(numero_ch="CH-1"))

    def test_suppression_bloquee(self):
        self.store.factures.enregistrer(Facture(dossier_id=self.dossier.id))
        assert dossier_a_factures(self.store, self.dossier.id) is True
        with pytest.raises(IntegrityViolationError):
            supprimer_dossier(self.store, self.dossier.id)
        assert self.store.dossiers.get_par_id(self.dossier.id) is not None

    def test_suppression_autorisee(self):
        assert dossier_a_factures(self.store, self.dossier.id) is False
        supprimer_dossier(self.store, self.dossier.id)
        assert self.store.dossiers.lister() == []

    def test_dossier_inconnu(self):
        with pytest.raises(NotFoundError):
            supprimer_dossier(self.store, "inconnu")
